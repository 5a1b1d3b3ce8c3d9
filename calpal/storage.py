import json
from datetime import datetime
from pathlib import Path
from typing import Any, TypedDict

import structlog

from calpal.exceptions import ValidationError
from calpal.utils.date_and_time import format_instant
from calpal.validation import ValidatedFixture, ValidatedFixtureDict

logger = structlog.get_logger(__name__)

SCHEMA_VERSION = "1.0"


class FixtureFileDict(TypedDict):
    schema_version: str
    generated_at: str
    fixtures: list[ValidatedFixtureDict]


class Storage:
    """Loads and saves validated fixtures as a single JSON file.

    Records are stored verbatim, including their validation; loading does
    not re-classify anything.
    """

    def __init__(self, path: str):
        """Initializes the Storage instance.

        Args:
            path: Path of the JSON file (e.g. 'data/fixtures.json').
        """
        self.path = Path(path)
        self.schema_version = SCHEMA_VERSION

    def _read(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("fixtures_load_failed", error=str(e), path=str(self.path))
            return None

        if not isinstance(data, dict):
            logger.error("fixtures_file_malformed", path=str(self.path))
            return None
        return data

    def load(self) -> list[ValidatedFixture]:
        """Loads validated fixtures from the file.

        Returns:
            The stored fixtures; [] if the file is missing, unreadable or malformed.
            Records that do not decode are logged and skipped.
        """
        data = self._read()
        if data is None:
            return []

        records = data.get("fixtures", [])
        if not isinstance(records, list):
            logger.error("fixtures_file_malformed", path=str(self.path))
            return []

        fixtures = []
        for index, record in enumerate(records):
            try:
                fixtures.append(ValidatedFixture.from_dict(record))
            except ValidationError as e:
                logger.error(
                    "fixture_record_invalid",
                    index=index,
                    path=str(self.path),
                    **e.to_dict(),
                )
        return fixtures

    def save(
        self,
        fixtures: list[ValidatedFixture],
        generated_at: datetime,
        pretty: bool = True,
    ) -> FixtureFileDict:
        """Writes validated fixtures, replacing the file.

        Args:
            fixtures: The fixtures to store.
            generated_at: Timestamp recorded in the file header.
            pretty: Indent the JSON; False writes it on one line.

        Returns:
            The document that was written.
        """
        document: FixtureFileDict = {
            "schema_version": self.schema_version,
            "generated_at": format_instant(generated_at),
            "fixtures": [f.to_dict() for f in fixtures],
        }

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2 if pretty else None, ensure_ascii=False)
            f.write("\n")

        logger.info("fixtures_saved", count=len(fixtures), path=str(self.path))
        return document
