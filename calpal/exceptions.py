"""Exceptions raised by CalPal.

Each carries the offending input in ``error_data`` and a fix hint, so a
batch caller can log one structured event per failure and move on.
"""

from typing import Any


class CalPalError(Exception):
    """Root of the CalPal exception tree.

    ``to_dict()`` is what gets splatted into structlog events; ``str()`` is
    what the CLI shows, with the hint on a second line.
    """

    def __init__(
        self,
        message: str,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_data = dict(error_data or {})
        self.suggestion = suggestion

    def __str__(self) -> str:
        if not self.suggestion:
            return self.message
        return f"{self.message}\nSuggestion: {self.suggestion}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "error_data": self.error_data,
            "suggestion": self.suggestion,
        }


class DateTimeError(CalPalError):
    """A date phrase and time of day could not be turned into an instant.

    Always recoverable: a batch caller logs it and skips the fixture.

    Examples:
        - "InvalidDay Blah 99" / "25:99"
        - Feb 29 in a year window with no leap year
        - A machine-readable timestamp that is not ISO 8601
    """

    def __init__(
        self,
        message: str,
        date_phrase: str | None = None,
        time_of_day: str | None = None,
        strategies_attempted: list[str] | None = None,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        """Initialize datetime error.

        Args:
            message: Human-readable error message.
            date_phrase: The date text as scraped (e.g. "Sun Jul 27").
            time_of_day: The time text as scraped (e.g. "15:30").
            strategies_attempted: Names of the parsing stages that were tried.
            error_data: Additional context.
            suggestion: How to resolve the error.
        """
        data = dict(error_data or {})
        data.update(
            {
                "date_phrase": date_phrase,
                "time_of_day": time_of_day,
                "strategies_attempted": list(strategies_attempted or []),
            }
        )

        default_suggestion = suggestion or (
            "The source date format may have changed. "
            "Check the scraped text against the supported date patterns."
        )

        super().__init__(message, data, default_suggestion)
        self.date_phrase = date_phrase
        self.time_of_day = time_of_day
        self.strategies_attempted = list(strategies_attempted or [])


class ValidationError(CalPalError):
    """Persisted data does not match the fixture record contract.

    Examples:
        - Unknown strategy or validation discriminant
        - Missing required fields
        - Instant that is not an ISO 8601 string
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        expected: str | None = None,
        received: Any = None,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        """Initialize validation error.

        Args:
            message: Human-readable error message.
            field: Field name that failed validation.
            expected: Expected data type or format.
            received: Actual value received.
            error_data: Additional context.
            suggestion: How to resolve the error.
        """
        data = dict(error_data or {})
        data.update(
            {
                "field": field,
                "expected": expected,
                "received": str(received)[:200] if received is not None else None,
            }
        )

        default_suggestion = suggestion or (
            f"Expected {expected} for field '{field}', but received: {received}. "
            f"Check the stored file or regenerate it."
            if field and expected
            else "Review the data against schema.json."
        )

        super().__init__(message, data, default_suggestion)
        self.field = field
        self.expected = expected
        self.received = received


class ConfigurationError(CalPalError):
    """Invalid configuration, environment value or CLI argument.

    Examples:
        - Unknown IANA timezone name
        - Malformed --now timestamp
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        expected_format: str | None = None,
        example: str | None = None,
        error_data: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ):
        """Initialize configuration error.

        Args:
            message: Human-readable error message.
            parameter: Parameter name that's invalid.
            expected_format: Expected format for the parameter.
            example: Example of valid value.
            error_data: Additional context.
            suggestion: How to resolve the error.
        """
        data = dict(error_data or {})
        data.update(
            {
                "parameter": parameter,
                "expected_format": expected_format,
                "example": example,
            }
        )

        default_suggestion = suggestion or (
            f"Parameter '{parameter}' must be in format: {expected_format}. "
            f"Example: {example}"
            if parameter and expected_format and example
            else "Check the environment variables and command-line arguments."
        )

        super().__init__(message, data, default_suggestion)
        self.parameter = parameter
        self.expected_format = expected_format
        self.example = example
