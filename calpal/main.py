from datetime import datetime

import click
import structlog

from calpal.config import Settings
from calpal.exceptions import ConfigurationError, DateTimeError
from calpal.parsing import DateTimeParser
from calpal.sources.manual_source import ManualSource
from calpal.storage import Storage
from calpal.utils.date_and_time import format_instant, now_utc, parse_instant
from calpal.utils.logging_config import configure_logging
from calpal.validation import FixtureValidator

logger = structlog.get_logger(__name__)


def _resolve_now(value: str | None) -> datetime:
    """Parses the --now option; defaults to the wall clock."""
    if not value:
        return now_utc()
    try:
        return parse_instant(value)
    except ValueError:
        raise click.BadParameter(
            f"'{value}' is not an ISO 8601 timestamp (e.g. 2025-07-27T12:00:00Z)",
            param_hint="--now",
        ) from None


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, verbose):
    """CalPal - Sports Calendar Scraper"""
    settings = _load_settings()
    configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = settings


@cli.command()
@click.argument("date_phrase")
@click.argument("time_of_day")
@click.option("--now", "now_text", help="Current time (ISO 8601), defaults to now")
@click.option("--timezone", "timezone_name", help="Source timezone (IANA name)")
@click.pass_obj
def parse(settings, date_phrase, time_of_day, now_text, timezone_name):
    """Parse a scraped DATE_PHRASE and TIME_OF_DAY into a UTC instant."""
    now = _resolve_now(now_text)

    try:
        parser = DateTimeParser(
            default_timezone=timezone_name or settings.default_timezone,
            fallback_timezone=settings.fallback_timezone,
        )
        instant, metadata = parser.parse(date_phrase, time_of_day, now=now)
    except (DateTimeError, ConfigurationError) as e:
        logger.error("parse_failed", **e.to_dict())
        raise click.ClickException(e.message) from e

    click.echo(f"UTC:      {format_instant(instant)}")
    click.echo(f"Strategy: {metadata.parsing_strategy}")
    click.echo(f"Details:  {metadata.to_timezone_info()}")


@cli.command()
@click.argument("source_path", type=click.Path(exists=True))
@click.option("--output", help="Write validated fixtures to this JSON file")
@click.option("--now", "now_text", help="Current time (ISO 8601), defaults to now")
@click.option("--pretty", is_flag=True, help="Indent the --output JSON")
@click.option("--all", "show_all", is_flag=True, help="Also show unusable fixtures")
@click.pass_obj
def validate(settings, source_path, output, now_text, pretty, show_all):
    """Parse and validate hand-curated fixtures from SOURCE_PATH (YAML)."""
    now = _resolve_now(now_text)

    parser = DateTimeParser(
        default_timezone=settings.default_timezone,
        fallback_timezone=settings.fallback_timezone,
    )
    validator = FixtureValidator(display_timezone=settings.display_timezone)

    source = ManualSource(source_path)
    logger.info("validate_started", source=source.source_url, now=format_instant(now))
    validated = source.scrape(parser, now, validator)

    shown = [v for v in validated if show_all or v.is_usable()]
    usable = sum(1 for v in validated if v.is_usable())
    click.echo(f"{source.team_name}: {len(validated)} fixtures, {usable} usable")

    for item in shown:
        local = item.fixture.to_display_time(settings.display_timezone)
        click.echo("")
        click.echo(f"{local:%a %b %d %H:%M} ({format_instant(item.fixture.instant)})")
        click.echo(item.calendar_description())

    if output:
        Storage(output).save(validated, generated_at=now, pretty=pretty)
        click.echo(f"\nSaved {len(validated)} fixtures to {output}")


if __name__ == "__main__":
    cli()
