#!/usr/bin/env python3
"""Quick start example for CalPal.

This script parses a few scraped fixture rows, classifies them and writes
the result to JSON.

Everything runs offline with a fixed "now" so the output is reproducible.
"""

import sys
from datetime import UTC, datetime
from pathlib import Path

# Add parent directory to path to allow importing calpal
sys.path.insert(0, str(Path(__file__).parent.parent))

from calpal.ingest import RawFixture, ingest
from calpal.parsing import DateTimeParser
from calpal.storage import Storage


def main() -> None:
    """Run a simple parse-and-validate example."""
    now = datetime(2025, 7, 27, 12, 0, tzinfo=UTC)
    parser = DateTimeParser(current_time=now)

    rows = [
        RawFixture("Arsenal", "Chelsea", "Emirates Stadium", "Premier League",
                   date_phrase="Sun Jul 27", time_of_day="15:30"),
        # Wrong weekday on the source page
        RawFixture("Arsenal", "Liverpool", "Anfield", "Premier League",
                   date_phrase="Mon Aug 16", time_of_day="17:30"),
        RawFixture("Arsenal", "TBD", "Wembley", "FA Cup",
                   timestamp="2025-08-30T14:00:00Z"),
        RawFixture("Arsenal", "Spurs", "Emirates Stadium", "Premier League",
                   date_phrase="Someday", time_of_day="late"),
    ]

    print(f"Parsing {len(rows)} fixtures as of {now:%Y-%m-%d %H:%M} UTC")
    validated = ingest(rows, parser, now)

    for item in validated:
        print(f"\n{item.fixture.to_display_time():%a %b %d %H:%M}")
        print(f"  {item.fixture.parse_metadata.to_timezone_info()}")
        print("  " + item.calendar_description().replace("\n", "\n  "))

    # Initialize storage and save
    storage = Storage("example_fixtures.json")
    storage.save(validated, generated_at=now)
    print(f"\nSaved {len(validated)} fixtures to example_fixtures.json")


if __name__ == "__main__":
    main()
