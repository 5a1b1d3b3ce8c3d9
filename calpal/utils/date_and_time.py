import zoneinfo
from datetime import UTC, datetime

from calpal.exceptions import ConfigurationError

# Indexed by datetime.weekday() (Monday == 0).
WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

# Lookup order used when recovering a weekday from a free-text token.
_WEEKDAY_LOOKUP_ORDER = (6, 0, 1, 2, 3, 4, 5)


def now_utc() -> datetime:
    """Returns the current wall-clock time in UTC."""
    return datetime.now(UTC)


def get_timezone(name: str) -> zoneinfo.ZoneInfo:
    """Resolves an IANA timezone name.

    Args:
        name: The timezone name (e.g., 'Europe/London').

    Returns:
        The ZoneInfo for the name.

    Raises:
        ConfigurationError: If the name is not a known timezone.
    """
    try:
        return zoneinfo.ZoneInfo(name)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(
            f"Unknown timezone: {name}",
            parameter="timezone",
            expected_format="IANA timezone name",
            example="Europe/London",
        ) from e


def localize(naive: datetime, tz: zoneinfo.ZoneInfo) -> datetime | None:
    """Attaches a timezone to a naive local datetime, refusing to guess.

    A wall-clock time inside a DST fold happens twice and one inside a DST
    gap never happens; both resolve to two different offsets depending on
    ``fold``, and neither is picked.

    Args:
        naive: Local wall-clock time without tzinfo.
        tz: The timezone the wall-clock time belongs to.

    Returns:
        The aware datetime, or None if the local time is ambiguous or
        does not exist.
    """
    first = naive.replace(tzinfo=tz, fold=0)
    second = naive.replace(tzinfo=tz, fold=1)
    if first.utcoffset() != second.utcoffset():
        return None
    return first


def ensure_utc(dt: datetime) -> datetime:
    """Normalizes an aware datetime to UTC; naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def format_instant(dt: datetime) -> str:
    """Formats an instant as ISO 8601 UTC with a 'Z' suffix.

    Example: 2025-07-27T14:30:00Z
    """
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")


def parse_instant(value: str) -> datetime:
    """Parses an ISO 8601 timestamp into a UTC instant.

    Accepts a 'Z' suffix or an explicit offset. Timestamps without an
    offset are taken as UTC.

    Args:
        value: The timestamp string.

    Returns:
        An aware datetime in UTC.

    Raises:
        ValueError: If the string is not ISO 8601.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def weekday_name(dt: datetime) -> str:
    """Returns the full English weekday name of a datetime (e.g. 'Sunday')."""
    return WEEKDAY_NAMES[dt.weekday()]


def weekday_matches(claimed: str, weekday: int) -> bool:
    """Checks a scraped weekday token against an actual weekday.

    Case-insensitive. The token matches when it is the full name or starts
    with the three-letter abbreviation ("sun", "Sunday", "Tues", "THURS").

    Args:
        claimed: The weekday token from the source.
        weekday: The actual weekday (Monday == 0).

    Returns:
        True if the token names the weekday.
    """
    claimed_lower = claimed.strip().lower()
    actual = WEEKDAY_NAMES[weekday].lower()
    return claimed_lower == actual or claimed_lower.startswith(actual[:3])


def weekday_from_token(token: str) -> int | None:
    """Recovers a weekday from a free-text token by abbreviation containment.

    Args:
        token: A weekday token such as 'Sun', 'sunday' or 'Sun,'.

    Returns:
        The weekday (Monday == 0), or None if no abbreviation is found.
    """
    lower = token.lower()
    for index in _WEEKDAY_LOOKUP_ORDER:
        if WEEKDAY_NAMES[index][:3].lower() in lower:
            return index
    return None


def zone_label(tz: zoneinfo.ZoneInfo) -> str:
    """Short human label for a timezone ('Europe/London' -> 'London')."""
    return tz.key.split("/")[-1].replace("_", " ")
