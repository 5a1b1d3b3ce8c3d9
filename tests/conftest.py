"""Shared pytest fixtures for CalPal tests."""

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from calpal.models import ExactMatch, Fixture, ParseMetadata
from calpal.parsing import DateTimeParser
from calpal.validation import FixtureValidator

# Summer, so Europe/London is on BST (UTC+1).
NOW = datetime(2025, 7, 27, 12, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    """Fixed current time used across tests."""
    return NOW


@pytest.fixture
def parser() -> DateTimeParser:
    """London parser with the current time pinned to NOW."""
    return DateTimeParser(current_time=NOW)


@pytest.fixture
def validator() -> FixtureValidator:
    return FixtureValidator()


@pytest.fixture
def exact_metadata() -> ParseMetadata:
    return ParseMetadata(
        original_source="Fri Aug 15 17:30",
        weekday_mismatch=None,
        timezone_assumptions="Parsed as Europe/London timezone",
        parsing_strategy=ExactMatch(),
    )


@pytest.fixture
def make_fixture(exact_metadata: ParseMetadata) -> Callable[..., Fixture]:
    """Factory for fixtures; defaults to a clean Premier League home game."""

    def _make_fixture(**overrides: Any) -> Fixture:
        fields: dict[str, Any] = {
            "team": "Arsenal",
            "opponent": "Chelsea",
            "instant": datetime(2025, 8, 15, 16, 30, tzinfo=UTC),
            "venue": "Emirates Stadium",
            "competition": "Premier League",
            "parse_metadata": exact_metadata,
        }
        fields.update(overrides)
        return Fixture(**fields)

    return _make_fixture


@pytest.fixture
def schema_path() -> Path:
    return Path(__file__).parent.parent / "schema.json"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keeps CalPal environment overrides from leaking into tests."""
    for name in (
        "CALPAL_TIMEZONE",
        "CALPAL_FALLBACK_TIMEZONE",
        "CALPAL_DISPLAY_TIMEZONE",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
