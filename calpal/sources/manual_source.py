import os
from datetime import datetime
from typing import Any

import structlog
import yaml

from calpal.ingest import RawFixture
from calpal.sources.base_source import FixtureSource
from calpal.utils.date_and_time import format_instant

logger = structlog.get_logger(__name__)

FIXTURES_FILENAME = "fixtures.yaml"


def _coerce_time(value: Any) -> str:
    """Normalizes a YAML time value to HH:MM text.

    YAML 1.1 reads an unquoted 15:30 as the base-60 integer 930.
    """
    if value is None:
        return ""
    if isinstance(value, int) and not isinstance(value, bool):
        return f"{value // 60:02d}:{value % 60:02d}"
    return str(value).strip()


def _coerce_timestamp(value: Any) -> str | None:
    """Normalizes a YAML timestamp (parsed or quoted) to ISO 8601 text."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return format_instant(value)
    return str(value).strip()


class ManualSource(FixtureSource):
    """Source for hand-curated fixtures in YAML files.

    Expected layout of each file::

        team: Arsenal
        source_url: https://www.arsenal.com/fixtures   # optional
        fixtures:
          - opponent: Chelsea
            date: Sun Jul 27
            time: "15:30"
            venue: Emirates Stadium
            competition: Premier League
          - opponent: Liverpool
            timestamp: 2025-08-15T16:30:00Z   # bypasses date parsing
            venue: Anfield
            competition: Premier League
    """

    def __init__(self, path: str):
        """Initializes the ManualSource.

        Args:
            path: A YAML file, or a directory scanned recursively for
                'fixtures.yaml' files.
        """
        self.path = path
        self._team_names: list[str] = []

    @property
    def team_name(self) -> str:
        if len(self._team_names) == 1:
            return self._team_names[0]
        if self._team_names:
            return ", ".join(sorted(set(self._team_names)))
        return "Manual"

    @property
    def source_url(self) -> str:
        return f"file://{os.path.abspath(self.path)}"

    def _yaml_paths(self) -> list[str]:
        if os.path.isfile(self.path):
            return [self.path]

        paths = []
        for root, _dirs, files in os.walk(self.path):
            if FIXTURES_FILENAME in files:
                paths.append(os.path.join(root, FIXTURES_FILENAME))
        return sorted(paths)

    def fetch_raw_fixtures(self) -> list[RawFixture]:
        """Loads raw fixture rows from every YAML file under the path.

        Returns:
            Raw rows in file order. Missing paths, malformed files and
            malformed entries are logged and skipped.
        """
        raw_fixtures: list[RawFixture] = []
        self._team_names = []

        if not os.path.exists(self.path):
            logger.warning("manual_fixtures_not_found", path=self.path)
            return raw_fixtures

        for yaml_path in self._yaml_paths():
            try:
                raw_fixtures.extend(self._parse_fixtures_yaml(yaml_path))
            except (OSError, yaml.YAMLError) as e:
                logger.error("manual_fixtures_load_failed", path=yaml_path, error=str(e))

        logger.info(
            "manual_fixtures_loaded", count=len(raw_fixtures), path=self.path
        )
        return raw_fixtures

    def _parse_fixtures_yaml(self, yaml_path: str) -> list[RawFixture]:
        """Parses a single fixtures.yaml file.

        Args:
            yaml_path: Path to the YAML file.

        Returns:
            The raw rows in the file (empty if the file is empty).
        """
        with open(yaml_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not data:
            return []
        if not isinstance(data, dict):
            logger.error("manual_fixtures_malformed", path=yaml_path)
            return []

        team = str(data.get("team") or "").strip()
        if team:
            self._team_names.append(team)

        rows = []
        for index, entry in enumerate(data.get("fixtures") or []):
            if not isinstance(entry, dict):
                logger.error(
                    "manual_fixture_entry_malformed", path=yaml_path, index=index
                )
                continue

            rows.append(
                RawFixture(
                    team=str(entry.get("team") or team),
                    opponent=str(entry.get("opponent") or "TBD"),
                    venue=str(entry.get("venue") or ""),
                    competition=str(entry.get("competition") or ""),
                    date_phrase=str(entry.get("date") or ""),
                    time_of_day=_coerce_time(entry.get("time")),
                    timestamp=_coerce_timestamp(entry.get("timestamp")),
                )
            )

        return rows
