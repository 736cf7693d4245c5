"""structlog configuration for propsrealm.

All modules log through stdlib ``logging.getLogger(__name__)``; this routes
those records through structlog's ProcessorFormatter on stderr.

Two output modes:
- Human (default): console renderer, colored on a TTY
- JSON (--log-json): one JSON object per line, tracebacks as strings
"""

from __future__ import annotations

import logging
import sys

import structlog

PACKAGE_LOGGER = "propsrealm"


def _resolve_level(verbose: bool, level: str | None) -> int:
    if verbose:
        return logging.DEBUG
    if level:
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, int):
            return resolved
    return logging.WARNING


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    level: str | None = None,
) -> None:
    """Configure structlog processors and output routing.

    Args:
        verbose: Force DEBUG for the ``propsrealm`` logger.
        log_json: Use the JSON renderer instead of the console renderer.
        level: Level name for the ``propsrealm`` logger when not verbose
            (default WARNING). Unknown names fall back to WARNING.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    render_chain: list[structlog.types.Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if log_json:
        render_chain += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        render_chain.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=render_chain,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(_resolve_level(verbose, level))
