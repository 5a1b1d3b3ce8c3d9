from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, TypedDict

from calpal.config import DEFAULT_TIMEZONE
from calpal.exceptions import ValidationError
from calpal.utils.date_and_time import (
    format_instant,
    get_timezone,
    parse_instant,
)


class WeekdayMismatchDict(TypedDict):
    claimed_weekday: str
    actual_weekday: str
    date: str


class ParseMetadataDict(TypedDict):
    original_source: str
    weekday_mismatch: WeekdayMismatchDict | None
    timezone_assumptions: str
    parsing_strategy: str | dict[str, Any]


class FixtureDict(TypedDict):
    team: str
    opponent: str
    instant: str  # ISO 8601 UTC: YYYY-MM-DDTHH:MM:SSZ
    venue: str
    competition: str
    parse_metadata: ParseMetadataDict


# --- Parsing strategies ---
#
# Closed set of outcomes describing how a parse succeeded. Consumers check
# every variant; adding one means updating strategy_to_dict/strategy_from_dict
# and ParseMetadata.to_timezone_info.


@dataclass(frozen=True)
class ExactMatch:
    """Weekday and date matched perfectly."""

    def __str__(self) -> str:
        return "Exact Match"


@dataclass(frozen=True)
class WeekdayTolerant:
    """Stated weekday was ignored; month and day were used."""

    def __str__(self) -> str:
        return "Weekday Tolerant"


@dataclass(frozen=True)
class YearAssumption:
    """The phrase only parsed in a year adjacent to the current one."""

    year: int

    def __str__(self) -> str:
        return f"Year Assumption ({self.year})"


@dataclass(frozen=True)
class TimezoneFallback:
    """Local time was ambiguous in the default zone; the fallback zone was used."""

    tz: str

    def __str__(self) -> str:
        return f"Timezone Fallback ({self.tz})"


Strategy = ExactMatch | WeekdayTolerant | YearAssumption | TimezoneFallback


def strategy_to_dict(strategy: Strategy) -> str | dict[str, Any]:
    """Encodes a strategy as an externally tagged value.

    Unit variants become bare strings, payload variants single-key objects:
    "ExactMatch", {"YearAssumption": 2024}, {"TimezoneFallback": "UTC"}.
    """
    if isinstance(strategy, ExactMatch):
        return "ExactMatch"
    if isinstance(strategy, WeekdayTolerant):
        return "WeekdayTolerant"
    if isinstance(strategy, YearAssumption):
        return {"YearAssumption": strategy.year}
    if isinstance(strategy, TimezoneFallback):
        return {"TimezoneFallback": strategy.tz}
    raise TypeError(f"Unknown parsing strategy: {strategy!r}")


def strategy_from_dict(data: Any) -> Strategy:
    """Decodes a strategy written by strategy_to_dict.

    Raises:
        ValidationError: If the value is not a known strategy encoding.
    """
    if data == "ExactMatch":
        return ExactMatch()
    if data == "WeekdayTolerant":
        return WeekdayTolerant()
    if isinstance(data, dict) and len(data) == 1:
        ((tag, payload),) = data.items()
        if tag == "YearAssumption" and isinstance(payload, int):
            return YearAssumption(payload)
        if tag == "TimezoneFallback" and isinstance(payload, str):
            return TimezoneFallback(payload)
    raise ValidationError(
        "Unknown parsing strategy",
        field="parsing_strategy",
        expected="ExactMatch | WeekdayTolerant | {YearAssumption: int} | "
        "{TimezoneFallback: str}",
        received=data,
    )


def _require(data: Any, key: str, expected_type: type, context: str) -> Any:
    if not isinstance(data, dict):
        raise ValidationError(
            f"{context} must be an object",
            field=context,
            expected="object",
            received=data,
        )
    if key not in data:
        raise ValidationError(
            f"{context} is missing '{key}'",
            field=key,
            expected=expected_type.__name__,
        )
    value = data[key]
    if not isinstance(value, expected_type):
        raise ValidationError(
            f"{context}.{key} has the wrong type",
            field=key,
            expected=expected_type.__name__,
            received=value,
        )
    return value


def decode_instant(value: Any, field: str) -> datetime:
    """Decodes a persisted ISO 8601 instant, raising ValidationError."""
    if not isinstance(value, str):
        raise ValidationError(
            f"{field} must be an ISO 8601 string",
            field=field,
            expected="ISO 8601 UTC timestamp",
            received=value,
        )
    try:
        return parse_instant(value)
    except ValueError as e:
        raise ValidationError(
            f"{field} is not a valid timestamp",
            field=field,
            expected="ISO 8601 UTC timestamp",
            received=value,
        ) from e


@dataclass(frozen=True)
class WeekdayMismatch:
    """The weekday a source stated disagreed with the computed one."""

    claimed_weekday: str  # As scraped, e.g. "Mon"
    actual_weekday: str  # Full name, e.g. "Sunday"
    date: str  # Date text without the weekday, e.g. "Jul 27"

    def to_dict(self) -> WeekdayMismatchDict:
        return {
            "claimed_weekday": self.claimed_weekday,
            "actual_weekday": self.actual_weekday,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "WeekdayMismatch":
        return cls(
            claimed_weekday=_require(data, "claimed_weekday", str, "weekday_mismatch"),
            actual_weekday=_require(data, "actual_weekday", str, "weekday_mismatch"),
            date=_require(data, "date", str, "weekday_mismatch"),
        )


@dataclass(frozen=True)
class ParseMetadata:
    """Audit trail of how a fixture's instant was obtained.

    Written once, by DateTimeParser or by the exact-timestamp bypass.
    """

    original_source: str
    weekday_mismatch: WeekdayMismatch | None
    timezone_assumptions: str
    parsing_strategy: Strategy

    def to_timezone_info(self) -> str:
        """One-line summary for verbose output and calendar notes.

        Example: "Parsed as Europe/London timezone - Mon Jul 27 15:30
        (claimed Mon, actually Sunday) [weekday-tolerant parsing]"
        """
        info = f"{self.timezone_assumptions} - {self.original_source}"

        if self.weekday_mismatch is not None:
            info += (
                f" (claimed {self.weekday_mismatch.claimed_weekday}, "
                f"actually {self.weekday_mismatch.actual_weekday})"
            )

        strategy = self.parsing_strategy
        if isinstance(strategy, WeekdayTolerant):
            info += " [weekday-tolerant parsing]"
        elif isinstance(strategy, YearAssumption):
            info += f" [assumed year {strategy.year}]"
        elif isinstance(strategy, TimezoneFallback):
            info += f" [fallback timezone: {strategy.tz}]"

        return info

    def has_data_quality_issues(self) -> bool:
        """True if the parser had to guess anything."""
        return self.weekday_mismatch is not None or not isinstance(
            self.parsing_strategy, ExactMatch
        )

    def to_dict(self) -> ParseMetadataDict:
        return {
            "original_source": self.original_source,
            "weekday_mismatch": (
                self.weekday_mismatch.to_dict() if self.weekday_mismatch else None
            ),
            "timezone_assumptions": self.timezone_assumptions,
            "parsing_strategy": strategy_to_dict(self.parsing_strategy),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ParseMetadata":
        if not isinstance(data, dict):
            raise ValidationError(
                "parse_metadata must be an object",
                field="parse_metadata",
                expected="object",
                received=data,
            )
        mismatch = data.get("weekday_mismatch")
        if "parsing_strategy" not in data:
            raise ValidationError(
                "parse_metadata is missing 'parsing_strategy'",
                field="parsing_strategy",
                expected="strategy",
            )
        return cls(
            original_source=_require(data, "original_source", str, "parse_metadata"),
            weekday_mismatch=(
                WeekdayMismatch.from_dict(mismatch) if mismatch is not None else None
            ),
            timezone_assumptions=_require(
                data, "timezone_assumptions", str, "parse_metadata"
            ),
            parsing_strategy=strategy_from_dict(data["parsing_strategy"]),
        )


@dataclass(frozen=True)
class Fixture:
    """
    A single sports fixture ready for validation.

    The instant is always stored in UTC; use to_display_time() for local
    presentation. instant and parse_metadata come from DateTimeParser (or
    the exact-timestamp bypass in calpal.ingest) and are never rewritten.
    """

    team: str  # e.g. "Arsenal"
    opponent: str  # May be "TBD" for unconfirmed fixtures
    instant: datetime  # Kick-off, UTC
    venue: str
    competition: str  # e.g. "Premier League"
    parse_metadata: ParseMetadata

    def __post_init__(self) -> None:
        if self.instant.tzinfo is None:
            raise ValueError("Fixture instant must be timezone-aware")
        object.__setattr__(self, "instant", self.instant.astimezone(UTC))

    def to_display_time(self, tz_name: str = DEFAULT_TIMEZONE) -> datetime:
        """Converts the kick-off to a display timezone (GMT/BST by default)."""
        return self.instant.astimezone(get_timezone(tz_name))

    def to_dict(self) -> FixtureDict:
        return {
            "team": self.team,
            "opponent": self.opponent,
            "instant": format_instant(self.instant),
            "venue": self.venue,
            "competition": self.competition,
            "parse_metadata": self.parse_metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Fixture":
        return cls(
            team=_require(data, "team", str, "fixture"),
            opponent=_require(data, "opponent", str, "fixture"),
            instant=decode_instant(_require(data, "instant", str, "fixture"), "instant"),
            venue=_require(data, "venue", str, "fixture"),
            competition=_require(data, "competition", str, "fixture"),
            parse_metadata=ParseMetadata.from_dict(
                _require(data, "parse_metadata", dict, "fixture")
            ),
        )
