import logging
import sys

import structlog


def configure_logging(level: str = "INFO") -> None:
    """Routes structlog through stdlib logging on stderr.

    Library modules log with ``structlog.get_logger(__name__)``; this sets up
    the handler once for the CLI. stdout stays free for command output.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG").
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(log_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(
                key_order=["event"], sort_keys=True
            ),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )
