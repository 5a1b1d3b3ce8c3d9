from abc import ABC, abstractmethod
from datetime import datetime

from calpal.ingest import RawFixture, ingest
from calpal.parsing import DateTimeParser
from calpal.validation import FixtureValidator, ValidatedFixture


class FixtureSource(ABC):
    """Abstract base class for fixture sources (one team, one page)."""

    @property
    @abstractmethod
    def team_name(self) -> str:
        """Human-readable team name."""

    @property
    @abstractmethod
    def source_url(self) -> str:
        """Where the fixtures come from, for debugging and transparency."""

    @abstractmethod
    def fetch_raw_fixtures(self) -> list[RawFixture]:
        """Fetches the raw fixture rows.

        Returns:
            A list of RawFixture rows, unparsed.
        """
        pass

    def scrape(
        self,
        parser: DateTimeParser,
        now: datetime,
        validator: FixtureValidator | None = None,
    ) -> list[ValidatedFixture]:
        """Fetches, parses and validates this source's fixtures.

        Args:
            parser: Parser for free-text dates.
            now: Current time for year assumption and classification.
            validator: Validator to use (default if None).

        Returns:
            Validated fixtures; rows with unparseable dates are skipped.
        """
        return ingest(self.fetch_raw_fixtures(), parser, now, validator)
