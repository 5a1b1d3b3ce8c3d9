from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from calpal.models import Fixture, ParseMetadata, WeekdayMismatch, WeekdayTolerant
from calpal.parsing import DateTimeParser
from calpal.validation import (
    Category,
    FixtureValidator,
    Historical,
    Invalid,
    Severity,
    Valid,
    ValidatedFixture,
    ValidationIssue,
    ValidWithWarnings,
)


def _mismatch_metadata(claimed: str) -> ParseMetadata:
    return ParseMetadata(
        original_source=f"{claimed} Aug 15 17:30",
        weekday_mismatch=WeekdayMismatch(
            claimed_weekday=claimed, actual_weekday="Friday", date="Aug 15"
        ),
        timezone_assumptions="Parsed as Europe/London timezone",
        parsing_strategy=WeekdayTolerant(),
    )


def test_clean_fixture_is_valid(
    make_fixture: Callable[..., Fixture], validator: FixtureValidator, now: datetime
) -> None:
    validated = ValidatedFixture.from_fixture(make_fixture(), now, validator)

    assert validated.validation == Valid()
    assert validated.is_usable()


def test_past_fixture_is_historical(
    make_fixture: Callable[..., Fixture], validator: FixtureValidator, now: datetime
) -> None:
    """Historical short-circuits every other check."""
    fixture = make_fixture(
        instant=datetime(2020, 1, 1, 15, 0, tzinfo=UTC), opponent="TBD", venue=""
    )

    assert validator.classify(fixture, now) == Historical(now)


def test_fixture_at_now_is_not_historical(
    make_fixture: Callable[..., Fixture], validator: FixtureValidator, now: datetime
) -> None:
    assert validator.classify(make_fixture(instant=now), now) == Valid()


def test_naive_now_is_taken_as_utc(
    make_fixture: Callable[..., Fixture], validator: FixtureValidator
) -> None:
    naive_now = datetime(2025, 8, 20, 12, 0)

    validation = validator.classify(make_fixture(), naive_now)

    assert validation == Historical(datetime(2025, 8, 20, 12, 0, tzinfo=UTC))


def test_far_future_fixture_is_invalid(
    make_fixture: Callable[..., Fixture], validator: FixtureValidator, now: datetime
) -> None:
    fixture = make_fixture(instant=datetime(2030, 8, 15, 16, 30, tzinfo=UTC))

    validation = validator.classify(fixture, now)

    assert isinstance(validation, Invalid)
    (issue,) = validation.issues
    assert issue.severity == Severity.CRITICAL
    assert issue.category == Category.DATA_INCONSISTENCY
    assert issue.message == (
        "Fixture date 2030-08-15 is outside reasonable range (2025-2027). "
        "Fixtures only planned 2 years ahead."
    )
    assert not ValidatedFixture(fixture, validation).is_usable()


def test_last_year_in_range_is_valid(
    make_fixture: Callable[..., Fixture], validator: FixtureValidator, now: datetime
) -> None:
    fixture = make_fixture(instant=datetime(2027, 12, 31, 16, 30, tzinfo=UTC))

    assert validator.classify(fixture, now) == Valid()


def test_invalid_keeps_every_issue(
    make_fixture: Callable[..., Fixture], validator: FixtureValidator, now: datetime
) -> None:
    fixture = make_fixture(
        instant=datetime(2030, 8, 15, 16, 30, tzinfo=UTC), opponent="TBD"
    )

    validation = validator.classify(fixture, now)

    assert isinstance(validation, Invalid)
    assert [i.category for i in validation.issues] == [
        Category.DATA_INCONSISTENCY,
        Category.MISSING_DATA,
    ]


def test_weekday_mismatch_warning(
    make_fixture: Callable[..., Fixture], validator: FixtureValidator, now: datetime
) -> None:
    """Aug 15 2025 is a Friday."""
    fixture = make_fixture(parse_metadata=_mismatch_metadata("Sun"))

    validation = validator.classify(fixture, now)

    assert isinstance(validation, ValidWithWarnings)
    (issue,) = validation.issues
    assert issue.severity == Severity.WARNING
    assert issue.category == Category.DATE_WEEKDAY_MISMATCH
    assert issue.message == (
        "Date Aug 15, 2025 is a Friday, but source indicated Sunday. "
        "Source may have incorrect weekday."
    )


@pytest.mark.parametrize("claimed", ["Fri", "friday", "Xyz"])
def test_weekday_check_needs_a_real_disagreement(
    make_fixture: Callable[..., Fixture],
    validator: FixtureValidator,
    now: datetime,
    claimed: str,
) -> None:
    fixture = make_fixture(parse_metadata=_mismatch_metadata(claimed))

    assert validator.classify(fixture, now) == Valid()


def test_early_kickoff_is_suspicious(
    make_fixture: Callable[..., Fixture], validator: FixtureValidator, now: datetime
) -> None:
    """03:00 UTC is 04:00 in London during BST."""
    fixture = make_fixture(instant=datetime(2025, 8, 15, 3, 0, tzinfo=UTC))

    validation = validator.classify(fixture, now)

    assert isinstance(validation, ValidWithWarnings)
    (issue,) = validation.issues
    assert issue.category == Category.SUSPICIOUS_TIME
    assert issue.message == "Unusual fixture time: 4:00 London time"


def test_late_kickoff_within_bounds(
    make_fixture: Callable[..., Fixture], validator: FixtureValidator, now: datetime
) -> None:
    """22:45 UTC is 23:45 in London, still in the last accepted hour."""
    fixture = make_fixture(instant=datetime(2025, 8, 15, 22, 45, tzinfo=UTC))

    assert validator.classify(fixture, now) == Valid()


def test_kickoff_checked_in_display_timezone(
    make_fixture: Callable[..., Fixture], now: datetime
) -> None:
    validator = FixtureValidator(display_timezone="America/New_York")

    validation = validator.classify(make_fixture(), now)

    assert isinstance(validation, Valid)

    fixture = make_fixture(instant=datetime(2025, 8, 15, 9, 0, tzinfo=UTC))
    validation = validator.classify(fixture, now)
    assert isinstance(validation, ValidWithWarnings)
    assert validation.issues[0].message == "Unusual fixture time: 5:00 New York time"


def test_tbd_opponent_is_a_single_warning(
    make_fixture: Callable[..., Fixture], validator: FixtureValidator, now: datetime
) -> None:
    validated = ValidatedFixture.from_fixture(
        make_fixture(opponent="TBD"), now, validator
    )

    assert isinstance(validated.validation, ValidWithWarnings)
    assert validated.validation.issues == (
        ValidationIssue(
            severity=Severity.WARNING,
            category=Category.MISSING_DATA,
            message="Opponent not yet determined",
            suggested_fix="Check source closer to fixture date",
        ),
    )
    assert validated.is_usable()


def test_missing_venue_is_an_error_but_usable(
    make_fixture: Callable[..., Fixture], validator: FixtureValidator, now: datetime
) -> None:
    validated = ValidatedFixture.from_fixture(make_fixture(venue=""), now, validator)

    assert isinstance(validated.validation, ValidWithWarnings)
    (issue,) = validated.validation.issues
    assert issue.severity == Severity.ERROR
    assert issue.message == "Venue information missing"
    assert issue.suggested_fix is None
    assert validated.is_usable()


def test_placeholder_opponent_and_venue(
    make_fixture: Callable[..., Fixture], validator: FixtureValidator, now: datetime
) -> None:
    fixture = make_fixture(opponent="Unknown Opponent", venue="Unknown Venue")

    validation = validator.classify(fixture, now)

    assert isinstance(validation, ValidWithWarnings)
    assert [i.severity for i in validation.issues] == [Severity.WARNING, Severity.ERROR]


def test_severity_ordering() -> None:
    assert Severity.WARNING < Severity.ERROR < Severity.CRITICAL
    assert str(Severity.CRITICAL) == "CRITICAL"
    assert str(Category.DATE_WEEKDAY_MISMATCH) == "Date/Weekday Mismatch"


def test_tiers_with_issues_cannot_be_empty() -> None:
    with pytest.raises(ValueError):
        ValidWithWarnings(())
    with pytest.raises(ValueError):
        Invalid(())


def test_calendar_description_valid(
    make_fixture: Callable[..., Fixture], now: datetime
) -> None:
    validated = ValidatedFixture.from_fixture(make_fixture(), now)

    assert validated.calendar_description() == (
        "Arsenal vs Chelsea at Emirates Stadium\nCompetition: Premier League"
    )


def test_calendar_description_with_warnings(
    make_fixture: Callable[..., Fixture], now: datetime
) -> None:
    validated = ValidatedFixture.from_fixture(make_fixture(opponent="TBD"), now)

    description = validated.calendar_description()

    assert description == (
        "Arsenal vs TBD at Emirates Stadium\nCompetition: Premier League"
        "\n\n⚠️ Data Quality Notes:\n• Opponent not yet determined"
    )
    assert validated.calendar_description() == description


def test_calendar_description_invalid(
    make_fixture: Callable[..., Fixture], now: datetime
) -> None:
    fixture = make_fixture(instant=datetime(2030, 8, 15, 16, 30, tzinfo=UTC))
    validated = ValidatedFixture.from_fixture(fixture, now)

    description = validated.calendar_description()

    assert "\n\n❌ Data Issues Detected:\n• Fixture date 2030-08-15" in description


def test_calendar_description_historical(
    make_fixture: Callable[..., Fixture], now: datetime
) -> None:
    fixture = make_fixture(instant=datetime(2025, 5, 1, 19, 0, tzinfo=UTC))
    validated = ValidatedFixture.from_fixture(fixture, now)

    assert validated.calendar_description().endswith(
        "\n\n📅 Historical fixture (scraped 2025-07-27)"
    )
    assert not validated.is_usable()


def test_parsed_weekday_mismatch_flows_into_validation(
    parser: DateTimeParser, now: datetime
) -> None:
    instant, metadata = parser.parse("Mon Jul 27", "15:30")
    fixture = Fixture(
        team="Arsenal",
        opponent="Chelsea",
        instant=instant,
        venue="Emirates Stadium",
        competition="Premier League",
        parse_metadata=metadata,
    )

    validated = ValidatedFixture.from_fixture(fixture, now)

    assert isinstance(validated.validation, ValidWithWarnings)
    (issue,) = validated.validation.issues
    assert issue.category == Category.DATE_WEEKDAY_MISMATCH
    assert "is a Sunday, but source indicated Monday" in issue.message
