"""Tiered fixture validation for calendar use.

Not all scraped data is equal. Each fixture is classified into:

- ``Valid``: ready for the calendar as is.
- ``ValidWithWarnings``: usable, with data quality notes (weekday
  mismatches, unusual kick-off times, opponent or venue not known yet).
- ``Invalid``: at least one critical problem, do not use.
- ``Historical``: already kicked off, useless for planning.

Warnings end up in the calendar event description so whoever organises the
watching party knows which details to double check.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, TypedDict

from calpal.config import (
    DEFAULT_TIMEZONE,
    EARLIEST_REASONABLE_HOUR,
    LATEST_REASONABLE_HOUR,
    MAX_YEARS_AHEAD,
    OPPONENT_PLACEHOLDERS,
    VENUE_PLACEHOLDERS,
)
from calpal.exceptions import ValidationError
from calpal.models import Fixture, FixtureDict, decode_instant
from calpal.utils.date_and_time import (
    WEEKDAY_NAMES,
    ensure_utc,
    format_instant,
    get_timezone,
    weekday_from_token,
    zone_label,
)


class Severity(IntEnum):
    WARNING = 1  # Keep fixture, but note the issue
    ERROR = 2  # Fixture is problematic but might be usable
    CRITICAL = 3  # Fixture should not be used

    def __str__(self) -> str:
        return self.name

    def to_dict(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_dict(cls, data: Any) -> "Severity":
        if isinstance(data, str) and data.upper() in cls.__members__:
            return cls[data.upper()]
        raise ValidationError(
            "Unknown issue severity",
            field="severity",
            expected="Warning | Error | Critical",
            received=data,
        )


class Category(Enum):
    DATE_WEEKDAY_MISMATCH = "DateWeekdayMismatch"
    HISTORICAL_FIXTURE = "HistoricalFixture"
    SUSPICIOUS_TIME = "SuspiciousTime"
    MISSING_DATA = "MissingData"
    DATA_INCONSISTENCY = "DataInconsistency"

    def __str__(self) -> str:
        return _CATEGORY_LABELS[self]

    @classmethod
    def from_dict(cls, data: Any) -> "Category":
        try:
            return cls(data)
        except ValueError as e:
            raise ValidationError(
                "Unknown issue category",
                field="category",
                expected=" | ".join(c.value for c in cls),
                received=data,
            ) from e


_CATEGORY_LABELS = {
    Category.DATE_WEEKDAY_MISMATCH: "Date/Weekday Mismatch",
    Category.HISTORICAL_FIXTURE: "Historical Fixture",
    Category.SUSPICIOUS_TIME: "Suspicious Time",
    Category.MISSING_DATA: "Missing Data",
    Category.DATA_INCONSISTENCY: "Data Inconsistency",
}


class ValidationIssueDict(TypedDict):
    severity: str
    category: str
    message: str
    suggested_fix: str | None


@dataclass(frozen=True)
class ValidationIssue:
    severity: Severity
    category: Category
    message: str
    suggested_fix: str | None = None

    def to_dict(self) -> ValidationIssueDict:
        return {
            "severity": self.severity.to_dict(),
            "category": self.category.value,
            "message": self.message,
            "suggested_fix": self.suggested_fix,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ValidationIssue":
        if not isinstance(data, dict):
            raise ValidationError(
                "Validation issue must be an object",
                field="issues",
                expected="object",
                received=data,
            )
        message = data.get("message")
        suggested_fix = data.get("suggested_fix")
        if not isinstance(message, str):
            raise ValidationError(
                "Validation issue message must be a string",
                field="message",
                expected="str",
                received=message,
            )
        if suggested_fix is not None and not isinstance(suggested_fix, str):
            raise ValidationError(
                "Validation issue suggested_fix must be a string or null",
                field="suggested_fix",
                expected="str | null",
                received=suggested_fix,
            )
        return cls(
            severity=Severity.from_dict(data.get("severity")),
            category=Category.from_dict(data.get("category")),
            message=message,
            suggested_fix=suggested_fix,
        )


# --- Validation tiers ---
#
# Closed set; is_usable, calendar_description, validation_to_dict and
# validation_from_dict all handle every variant.


@dataclass(frozen=True)
class Valid:
    pass


@dataclass(frozen=True)
class ValidWithWarnings:
    issues: tuple[ValidationIssue, ...]

    def __post_init__(self) -> None:
        if not self.issues:
            raise ValueError("ValidWithWarnings requires at least one issue")


@dataclass(frozen=True)
class Invalid:
    issues: tuple[ValidationIssue, ...]

    def __post_init__(self) -> None:
        if not self.issues:
            raise ValueError("Invalid requires at least one issue")


@dataclass(frozen=True)
class Historical:
    scraped_at: datetime  # When the fixture was classified, UTC


FixtureValidation = Valid | ValidWithWarnings | Invalid | Historical


def validation_to_dict(validation: FixtureValidation) -> str | dict[str, Any]:
    """Encodes a tier as an externally tagged value ("Valid", {"Invalid": [...]})."""
    if isinstance(validation, Valid):
        return "Valid"
    if isinstance(validation, ValidWithWarnings):
        return {"ValidWithWarnings": [i.to_dict() for i in validation.issues]}
    if isinstance(validation, Invalid):
        return {"Invalid": [i.to_dict() for i in validation.issues]}
    if isinstance(validation, Historical):
        return {"Historical": format_instant(validation.scraped_at)}
    raise TypeError(f"Unknown fixture validation: {validation!r}")


def validation_from_dict(data: Any) -> FixtureValidation:
    """Decodes a tier written by validation_to_dict.

    Raises:
        ValidationError: If the value is not a known tier encoding.
    """
    if data == "Valid":
        return Valid()
    if isinstance(data, dict) and len(data) == 1:
        ((tag, payload),) = data.items()
        if tag in ("ValidWithWarnings", "Invalid"):
            if not isinstance(payload, list) or not payload:
                raise ValidationError(
                    f"{tag} must carry a non-empty issue list",
                    field="validation",
                    expected="non-empty list of issues",
                    received=payload,
                )
            issues = tuple(ValidationIssue.from_dict(i) for i in payload)
            if tag == "Invalid":
                return Invalid(issues)
            return ValidWithWarnings(issues)
        if tag == "Historical":
            return Historical(decode_instant(payload, "Historical"))
    raise ValidationError(
        "Unknown fixture validation",
        field="validation",
        expected="Valid | {ValidWithWarnings: [...]} | {Invalid: [...]} | "
        "{Historical: timestamp}",
        received=data,
    )


class FixtureValidator:
    """Classifies fixtures into quality tiers.

    Every check is independent and reports at most one issue; the worst
    severity decides the tier. classify() never raises.
    """

    def __init__(
        self,
        display_timezone: str = DEFAULT_TIMEZONE,
        max_years_ahead: int = MAX_YEARS_AHEAD,
        earliest_hour: int = EARLIEST_REASONABLE_HOUR,
        latest_hour: int = LATEST_REASONABLE_HOUR,
    ) -> None:
        """Initializes the validator.

        Args:
            display_timezone: Zone used for weekday and kick-off time checks.
            max_years_ahead: Last accepted year, relative to the current one.
            earliest_hour: Earliest local kick-off hour not flagged.
            latest_hour: Latest local kick-off hour not flagged.

        Raises:
            ConfigurationError: If the display timezone is unknown.
        """
        self.display_timezone = get_timezone(display_timezone)
        self.max_years_ahead = max_years_ahead
        self.earliest_hour = earliest_hour
        self.latest_hour = latest_hour

    def classify(self, fixture: Fixture, now: datetime) -> FixtureValidation:
        """Classifies a fixture relative to the current time.

        Args:
            fixture: The fixture to classify.
            now: Current time; a naive value is taken as UTC.

        Returns:
            Historical(now) if the fixture already started, otherwise
            Invalid, ValidWithWarnings or Valid depending on the issues found.
        """
        now = ensure_utc(now)

        if fixture.instant < now:
            return Historical(now)

        issues: list[ValidationIssue] = []

        for check in (
            self.check_date_range(fixture, now),
            self.check_weekday_consistency(fixture),
            self.check_kickoff_time(fixture),
        ):
            if check is not None:
                issues.append(check)

        issues.extend(self.check_completeness(fixture))

        if any(i.severity == Severity.CRITICAL for i in issues):
            return Invalid(tuple(issues))
        if issues:
            return ValidWithWarnings(tuple(issues))
        return Valid()

    def check_date_range(
        self, fixture: Fixture, now: datetime
    ) -> ValidationIssue | None:
        """Flags fixtures outside [current year, current year + max_years_ahead]."""
        min_year = now.year
        max_year = now.year + self.max_years_ahead
        fixture_year = fixture.instant.year

        if min_year <= fixture_year <= max_year:
            return None

        return ValidationIssue(
            severity=Severity.CRITICAL,
            category=Category.DATA_INCONSISTENCY,
            message=(
                f"Fixture date {fixture.instant:%Y-%m-%d} is outside reasonable "
                f"range ({min_year}-{max_year}). "
                f"Fixtures only planned {max_year - min_year} years ahead."
            ),
            suggested_fix="Check date parsing and source data accuracy",
        )

    def check_weekday_consistency(self, fixture: Fixture) -> ValidationIssue | None:
        """Re-checks a weekday the parser recorded as mismatched.

        Only runs when the parse metadata holds a weekday mismatch; the
        claimed weekday is recovered from it and compared with the local
        date of the instant.
        """
        mismatch = fixture.parse_metadata.weekday_mismatch
        if mismatch is None:
            return None

        expected = weekday_from_token(mismatch.claimed_weekday)
        if expected is None:
            return None

        local = fixture.instant.astimezone(self.display_timezone)
        actual = local.weekday()
        if actual == expected:
            return None

        return ValidationIssue(
            severity=Severity.WARNING,
            category=Category.DATE_WEEKDAY_MISMATCH,
            message=(
                f"Date {local:%b %d, %Y} is a {WEEKDAY_NAMES[actual]}, but source "
                f"indicated {WEEKDAY_NAMES[expected]}. "
                "Source may have incorrect weekday."
            ),
            suggested_fix=(
                "Verify fixture date. If date is correct, ignore weekday discrepancy."
            ),
        )

    def check_kickoff_time(self, fixture: Fixture) -> ValidationIssue | None:
        """Flags kick-offs at unusual local hours."""
        local = fixture.instant.astimezone(self.display_timezone)
        if self.earliest_hour <= local.hour <= self.latest_hour:
            return None

        return ValidationIssue(
            severity=Severity.WARNING,
            category=Category.SUSPICIOUS_TIME,
            message=(
                f"Unusual fixture time: {local.hour}:{local.minute:02d} "
                f"{zone_label(self.display_timezone)} time"
            ),
            suggested_fix="Verify time zone conversion is correct",
        )

    def check_completeness(self, fixture: Fixture) -> list[ValidationIssue]:
        """Flags placeholder opponents and missing venues."""
        issues = []

        if any(marker in fixture.opponent for marker in OPPONENT_PLACEHOLDERS):
            issues.append(
                ValidationIssue(
                    severity=Severity.WARNING,
                    category=Category.MISSING_DATA,
                    message="Opponent not yet determined",
                    suggested_fix="Check source closer to fixture date",
                )
            )

        # Venue gaps are errors; opponent gaps are only warnings
        if not fixture.venue or any(
            marker in fixture.venue for marker in VENUE_PLACEHOLDERS
        ):
            issues.append(
                ValidationIssue(
                    severity=Severity.ERROR,
                    category=Category.MISSING_DATA,
                    message="Venue information missing",
                )
            )

        return issues


class ValidatedFixtureDict(TypedDict):
    fixture: FixtureDict
    validation: str | dict[str, Any]


@dataclass(frozen=True)
class ValidatedFixture:
    """A fixture together with its classification.

    Build it with from_fixture(), which classifies exactly once; the stored
    validation is never recomputed, including after a JSON round-trip.
    """

    fixture: Fixture
    validation: FixtureValidation

    @classmethod
    def from_fixture(
        cls,
        fixture: Fixture,
        now: datetime,
        validator: FixtureValidator | None = None,
    ) -> "ValidatedFixture":
        validator = validator or FixtureValidator()
        return cls(fixture=fixture, validation=validator.classify(fixture, now))

    def is_usable(self) -> bool:
        return not isinstance(self.validation, (Invalid, Historical))

    def calendar_description(self) -> str:
        """Text for the calendar event body, including any data quality notes."""
        description = (
            f"{self.fixture.team} vs {self.fixture.opponent} at {self.fixture.venue}"
            f"\nCompetition: {self.fixture.competition}"
        )

        validation = self.validation
        if isinstance(validation, ValidWithWarnings):
            description += "\n\n⚠️ Data Quality Notes:"
            for issue in validation.issues:
                description += f"\n• {issue.message}"
        elif isinstance(validation, Invalid):
            description += "\n\n❌ Data Issues Detected:"
            for issue in validation.issues:
                description += f"\n• {issue.message}"
        elif isinstance(validation, Historical):
            description += (
                f"\n\n📅 Historical fixture (scraped {validation.scraped_at:%Y-%m-%d})"
            )

        return description

    def to_dict(self) -> ValidatedFixtureDict:
        return {
            "fixture": self.fixture.to_dict(),
            "validation": validation_to_dict(self.validation),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ValidatedFixture":
        if not isinstance(data, dict) or "fixture" not in data or "validation" not in data:
            raise ValidationError(
                "Validated fixture must have 'fixture' and 'validation'",
                field="fixture",
                expected="object with fixture and validation",
                received=data,
            )
        return cls(
            fixture=Fixture.from_dict(data["fixture"]),
            validation=validation_from_dict(data["validation"]),
        )
