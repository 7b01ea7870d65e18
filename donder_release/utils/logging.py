"""Contains the structlog configuration of the command line interface."""

import logging
import os
import sys
from typing import Mapping

import structlog

from donder_release.utils.constants import CI_ENVIRONMENT_VARIABLES

LOG_HANDLER_NAME = "donder-release"


def is_ci_environment(environ: Mapping[str, str] | None = None) -> bool:
    """Whether the process runs in CI. Only the presence of a variable is checked."""
    environ = os.environ if environ is None else environ
    return any(name in environ for name in CI_ENVIRONMENT_VARIABLES)


def resolve_log_level(verbose: bool, ci: bool, debug: bool = False) -> int:
    """CI runs log progress at INFO; interactive runs only show warnings unless verbose."""
    if debug:
        return logging.DEBUG
    if verbose or ci:
        return logging.INFO
    return logging.WARNING


def configure_logging(verbose: bool = False, ci: bool = False, debug: bool = False) -> None:
    """Route structlog through the standard library logging module to stderr."""
    level = resolve_log_level(verbose, ci, debug)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=not ci),
            foreign_pre_chain=[structlog.stdlib.add_log_level, structlog.processors.TimeStamper(fmt="iso")],
        )
    )
    handler.set_name(LOG_HANDLER_NAME)
    root_logger = logging.getLogger()
    for existing in [h for h in root_logger.handlers if h.get_name() == LOG_HANDLER_NAME]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    # Keep HTTP client chatter out of release output unless debugging.
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
