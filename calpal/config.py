"""Configuration for CalPal.

Module constants hold the defaults; ``Settings.from_env`` lets a deployment
override the timezones and log level through environment variables.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from calpal.utils.date_and_time import get_timezone

# Fixtures are scraped from UK sites and planned in London time.
DEFAULT_TIMEZONE = "Europe/London"
FALLBACK_TIMEZONE = "UTC"

# Fixtures are only published this many years ahead.
MAX_YEARS_AHEAD = 2

# Local kick-off hours outside [EARLIEST, LATEST] are flagged.
EARLIEST_REASONABLE_HOUR = 8
LATEST_REASONABLE_HOUR = 23

# Markers used by fixture pages for data that is not known yet.
OPPONENT_PLACEHOLDERS: tuple[str, ...] = ("TBD", "Unknown")
VENUE_PLACEHOLDERS: tuple[str, ...] = ("Unknown",)


@dataclass(frozen=True)
class Settings:
    default_timezone: str = DEFAULT_TIMEZONE
    fallback_timezone: str = FALLBACK_TIMEZONE
    display_timezone: str = DEFAULT_TIMEZONE
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Builds settings from environment variables.

        Reads CALPAL_TIMEZONE, CALPAL_FALLBACK_TIMEZONE, CALPAL_DISPLAY_TIMEZONE
        and LOG_LEVEL. Timezone names are checked eagerly.

        Args:
            environ: Mapping to read from (defaults to os.environ).

        Returns:
            The resolved Settings.

        Raises:
            ConfigurationError: If a timezone name is unknown.
        """
        env = os.environ if environ is None else environ

        default_tz = env.get("CALPAL_TIMEZONE", DEFAULT_TIMEZONE)
        settings = cls(
            default_timezone=default_tz,
            fallback_timezone=env.get("CALPAL_FALLBACK_TIMEZONE", FALLBACK_TIMEZONE),
            display_timezone=env.get("CALPAL_DISPLAY_TIMEZONE", default_tz),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )

        for tz_name in (
            settings.default_timezone,
            settings.fallback_timezone,
            settings.display_timezone,
        ):
            get_timezone(tz_name)

        return settings
