"""Turns raw scraped fixture rows into validated fixtures.

A row either carries free-text date/time fragments, which go through
DateTimeParser, or a machine-readable timestamp, which bypasses the parser.
A row whose date cannot be parsed is logged and skipped; the rest of the
batch carries on.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

import structlog

from calpal.exceptions import DateTimeError
from calpal.models import ExactMatch, Fixture, ParseMetadata
from calpal.parsing import DateTimeParser
from calpal.utils.date_and_time import parse_instant
from calpal.validation import FixtureValidator, ValidatedFixture

logger = structlog.get_logger(__name__)


@dataclass
class RawFixture:
    """Text fragments for one fixture, as extracted by a source."""

    team: str
    opponent: str
    venue: str
    competition: str
    date_phrase: str = ""  # e.g. "Sun Jul 27"
    time_of_day: str = ""  # e.g. "15:30"
    timestamp: str | None = None  # ISO 8601, when the source exposes one


def exact_timestamp_metadata(display_text: str, timestamp: str) -> ParseMetadata:
    """Metadata for a fixture whose source gave an exact timestamp.

    Args:
        display_text: What the page showed to humans (may be empty).
        timestamp: The machine-readable timestamp used.

    Returns:
        Fully populated ParseMetadata tagged ExactMatch.
    """
    return ParseMetadata(
        original_source=f"{display_text} ({timestamp})",
        weekday_mismatch=None,
        timezone_assumptions="Parsed from ISO datetime attribute",
        parsing_strategy=ExactMatch(),
    )


def build_fixture(
    raw: RawFixture, parser: DateTimeParser, now: datetime | None = None
) -> Fixture:
    """Builds a Fixture from a raw row.

    Args:
        raw: The raw row.
        parser: Parser used for free-text dates.
        now: Current time passed through to the parser.

    Returns:
        The Fixture with its instant and parse metadata.

    Raises:
        DateTimeError: If the date cannot be determined.
    """
    if raw.timestamp:
        try:
            instant = parse_instant(raw.timestamp)
        except ValueError as e:
            raise DateTimeError(
                f"Invalid ISO timestamp: {raw.timestamp}",
                date_phrase=raw.date_phrase,
                time_of_day=raw.time_of_day,
                strategies_attempted=["exact-timestamp"],
                suggestion="The source timestamp attribute may have changed format.",
            ) from e
        display_text = " ".join(p for p in (raw.date_phrase, raw.time_of_day) if p)
        metadata = exact_timestamp_metadata(display_text, raw.timestamp)
    else:
        instant, metadata = parser.parse(raw.date_phrase, raw.time_of_day, now=now)

    return Fixture(
        team=raw.team,
        opponent=raw.opponent,
        instant=instant,
        venue=raw.venue,
        competition=raw.competition,
        parse_metadata=metadata,
    )


def ingest(
    raw_fixtures: Iterable[RawFixture],
    parser: DateTimeParser,
    now: datetime,
    validator: FixtureValidator | None = None,
) -> list[ValidatedFixture]:
    """Parses and validates a batch of raw fixtures.

    Args:
        raw_fixtures: Rows from a source.
        parser: Parser for free-text dates.
        now: Current time, used both for year assumption and classification.
        validator: Validator to use (default display timezone if None).

    Returns:
        Validated fixtures, in input order, without the rows that failed
        to parse.
    """
    validator = validator or FixtureValidator()
    validated: list[ValidatedFixture] = []
    skipped = 0

    for raw in raw_fixtures:
        try:
            fixture = build_fixture(raw, parser, now)
        except DateTimeError as e:
            skipped += 1
            logger.warning(
                "fixture_skipped",
                team=raw.team,
                opponent=raw.opponent,
                error=e.message,
                error_data=e.error_data,
            )
            continue

        if fixture.parse_metadata.has_data_quality_issues():
            logger.debug(
                "fixture_parse_guessed",
                opponent=fixture.opponent,
                info=fixture.parse_metadata.to_timezone_info(),
            )

        validated.append(ValidatedFixture.from_fixture(fixture, now, validator))

    logger.info(
        "ingest_complete",
        fixtures=len(validated),
        skipped=skipped,
        usable=sum(1 for v in validated if v.is_usable()),
    )
    return validated
