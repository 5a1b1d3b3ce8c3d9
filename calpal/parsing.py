"""Multi-stage date/time parsing with graceful degradation.

Fixture pages are messy: weekdays that disagree with the date, no year, and
local times that fall into a DST change. Instead of failing hard the parser
tries, in order:

1. Exact match: weekday, month and day all agree in the current year.
2. Weekday tolerance: ignore the stated weekday, record the mismatch.
3. Year assumption: exact match in the previous, then the next year.

A local time inside a DST fold or gap fails every stage; no offset is
guessed for it.

Every result carries ParseMetadata saying which of these happened.

"Now" is injected (``current_time`` or the ``now`` argument of ``parse``)
so results do not depend on the date the code runs on.
"""

import zoneinfo
from datetime import UTC, datetime

import structlog

from calpal.config import DEFAULT_TIMEZONE, FALLBACK_TIMEZONE
from calpal.exceptions import DateTimeError
from calpal.models import (
    ExactMatch,
    ParseMetadata,
    Strategy,
    WeekdayMismatch,
    WeekdayTolerant,
    YearAssumption,
)
from calpal.utils.date_and_time import (
    get_timezone,
    localize,
    now_utc,
    weekday_matches,
    weekday_name,
)

logger = structlog.get_logger(__name__)

# Patterns that require a leading weekday token. The date phrase is joined
# with the assumed year and the time of day before matching.
EXACT_FORMATS = (
    "%a %b %d %Y %H:%M",  # Sun Jul 27 2025 15:30
    "%A %B %d %Y %H:%M",  # Sunday July 27 2025 15:30
    "%A %b %d %Y %H:%M",  # Sunday Jul 27 2025 15:30
    "%a %B %d %Y %H:%M",  # Sun July 27 2025 15:30
    "%a, %b %d %Y %H:%M",  # Sun, Jul 27 2025 15:30
    "%A, %B %d %Y %H:%M",  # Sunday, July 27 2025 15:30
    "%a %d %b %Y %H:%M",  # Sun 27 Jul 2025 15:30
    "%A %d %B %Y %H:%M",  # Sunday 27 July 2025 15:30
)

# Patterns for the date phrase with its weekday token removed.
TOLERANT_FORMATS = (
    "%b %d %Y %H:%M",  # Jul 27 2025 15:30
    "%B %d %Y %H:%M",  # July 27 2025 15:30
    "%d %b %Y %H:%M",  # 27 Jul 2025 15:30
    "%d %B %Y %H:%M",  # 27 July 2025 15:30
)

STRATEGIES_ATTEMPTED = ["exact", "weekday-tolerant", "year-assumption"]


def _weekday_token(date_phrase: str) -> str:
    """Leading token of a date phrase without trailing punctuation ('Sun,' -> 'Sun')."""
    parts = date_phrase.split()
    return parts[0].rstrip(",.") if parts else ""


class DateTimeParser:
    """Turns scraped (date phrase, time of day) pairs into UTC instants.

    Pure apart from debug logging: the result depends only on the inputs,
    the configured timezones and the injected current time.
    """

    def __init__(
        self,
        default_timezone: str = DEFAULT_TIMEZONE,
        fallback_timezone: str = FALLBACK_TIMEZONE,
        current_time: datetime | None = None,
    ) -> None:
        """Initializes the parser.

        Args:
            default_timezone: Zone the scraped wall-clock times are in.
            fallback_timezone: Configured fallback zone. Parsing never
                localizes in it; a DST fold or gap in the default zone
                raises DateTimeError.
            current_time: Fixed "now" used to assume the year. None means
                the wall clock is read on each parse.

        Raises:
            ConfigurationError: If either timezone name is unknown.
        """
        self.default_timezone = get_timezone(default_timezone)
        self.fallback_timezone = get_timezone(fallback_timezone)
        self.current_time = current_time

    def _get_current_time(self, now: datetime | None) -> datetime:
        if now is not None:
            return now
        if self.current_time is not None:
            return self.current_time
        return now_utc()

    def parse(
        self,
        date_phrase: str,
        time_of_day: str,
        now: datetime | None = None,
    ) -> tuple[datetime, ParseMetadata]:
        """Parses a date phrase and time of day, degrading gracefully.

        Args:
            date_phrase: Date text without a year (e.g. "Sun Jul 27").
            time_of_day: 24-hour time (e.g. "15:30").
            now: Overrides the configured current time for this call.

        Returns:
            A tuple of (UTC instant, ParseMetadata).

        Raises:
            DateTimeError: If no strategy could parse the input.
        """
        phrase = " ".join(date_phrase.split())
        time_text = time_of_day.strip()
        original_source = f"{date_phrase} {time_of_day}"
        current_year = self._get_current_time(now).year

        result = self._parse_in_zone(
            phrase, time_text, original_source, current_year, self.default_timezone
        )
        if result is not None:
            return result

        raise DateTimeError(
            f"Could not parse datetime: {date_phrase} {time_of_day} "
            "(tried exact, weekday-tolerant, and year variants)",
            date_phrase=date_phrase,
            time_of_day=time_of_day,
            strategies_attempted=STRATEGIES_ATTEMPTED,
        )

    def _parse_in_zone(
        self,
        phrase: str,
        time_text: str,
        original_source: str,
        current_year: int,
        tz: zoneinfo.ZoneInfo,
    ) -> tuple[datetime, ParseMetadata] | None:
        """Runs the exact, weekday-tolerant and year stages in one zone."""
        # Stage 1: exact parsing with the claimed weekday
        result = self._try_exact(
            phrase, time_text, original_source, current_year, tz, ExactMatch()
        )
        if result is not None:
            return result

        # Stage 2: ignore the claimed weekday
        result = self._try_weekday_tolerant(
            phrase, time_text, original_source, current_year, tz
        )
        if result is not None:
            logger.debug("weekday_tolerant_parse", source=original_source)
            return result

        # Stage 3: adjacent years, for fixtures around the new year
        for try_year in (current_year - 1, current_year + 1):
            result = self._try_exact(
                phrase,
                time_text,
                original_source,
                try_year,
                tz,
                YearAssumption(try_year),
            )
            if result is not None:
                logger.debug("year_assumption_parse", source=original_source, year=try_year)
                return result

        return None

    def _try_exact(
        self,
        phrase: str,
        time_text: str,
        original_source: str,
        year: int,
        tz: zoneinfo.ZoneInfo,
        strategy: Strategy,
    ) -> tuple[datetime, ParseMetadata] | None:
        datetime_str = f"{phrase} {year} {time_text}"
        claimed = _weekday_token(phrase)

        for fmt in EXACT_FORMATS:
            try:
                naive = datetime.strptime(datetime_str, fmt)
            except ValueError:
                continue

            # strptime ignores %a/%A when the date is complete
            if not weekday_matches(claimed, naive.weekday()):
                continue

            local = localize(naive, tz)
            if local is None:
                logger.debug("ambiguous_local_time", value=datetime_str, timezone=tz.key)
                return None

            metadata = ParseMetadata(
                original_source=original_source,
                weekday_mismatch=None,
                timezone_assumptions=f"Parsed as {tz.key} timezone",
                parsing_strategy=strategy,
            )
            return local.astimezone(UTC), metadata

        return None

    def _try_weekday_tolerant(
        self,
        phrase: str,
        time_text: str,
        original_source: str,
        year: int,
        tz: zoneinfo.ZoneInfo,
    ) -> tuple[datetime, ParseMetadata] | None:
        parts = phrase.split()
        if len(parts) < 3:
            return None

        claimed = parts[0].rstrip(",.")
        date_without_weekday = " ".join(parts[1:])
        datetime_str = f"{date_without_weekday} {year} {time_text}"

        for fmt in TOLERANT_FORMATS:
            try:
                naive = datetime.strptime(datetime_str, fmt)
            except ValueError:
                continue

            local = localize(naive, tz)
            if local is None:
                logger.debug("ambiguous_local_time", value=datetime_str, timezone=tz.key)
                return None

            mismatch = None
            if not weekday_matches(claimed, local.weekday()):
                mismatch = WeekdayMismatch(
                    claimed_weekday=claimed,
                    actual_weekday=weekday_name(local),
                    date=date_without_weekday,
                )

            metadata = ParseMetadata(
                original_source=original_source,
                weekday_mismatch=mismatch,
                timezone_assumptions=f"Parsed as {tz.key} timezone",
                parsing_strategy=WeekdayTolerant(),
            )
            return local.astimezone(UTC), metadata

        return None
