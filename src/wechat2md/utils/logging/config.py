# ABOUTME: Loguru sink setup with structlog and stdlib records funnelled through it
# ABOUTME: Interactive runs log to files under logs/; production runs emit JSON lines on stdout

import contextlib
import io
import logging
import sys
from pathlib import Path
from typing import Any

import structlog
from loguru import logger

from wechat2md.config import get_config

LOG_DIRECTORY = Path("logs")

# Sink name -> default file inside LOG_DIRECTORY
LOG_FILES = {
    "main": "wechat2md.log",
    "json": "wechat2md.json",
    "errors": "errors.log",
}

# Browser automation and the event loop are silenced; HTTP and parsing stacks only surface warnings
LIBRARY_LOG_LEVELS = {
    "playwright": logging.CRITICAL,
    "asyncio": logging.CRITICAL,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "hpack": logging.WARNING,
    "websockets": logging.WARNING,
    "markdownify": logging.WARNING,
    "bs4": logging.WARNING,
    "py.warnings": logging.ERROR,
}

TEXT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


class LoggingMode:
    """Logging mode constants."""

    INTERACTIVE = "interactive"
    PRODUCTION = "production"


class InterceptHandler(logging.Handler):
    """Hand standard library records to loguru, keeping the caller's location."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


_active_mode: str | None = None


def current_logging_mode() -> str:
    """Mode applied by the last configure_logging call, else the configured WECHAT2MD_LOG_MODE."""
    return _active_mode or get_config().log_mode


def quiet_libraries() -> None:
    """Apply LIBRARY_LOG_LEVELS and route ``warnings`` through logging."""
    logging.captureWarnings(True)
    for name, level in LIBRARY_LOG_LEVELS.items():
        logging.getLogger(name).setLevel(level)


def setup_structlog() -> None:
    """Render structlog events as key=value lines on the standard library logger."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"], sort_keys=True),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def _add_stdout_sink(log_level: str) -> None:
    logger.add(sys.stdout, level=log_level, format="{time} | {level} | {name} | {message}", serialize=True)


def _add_file_sinks(log_level: str, log_file: str | None) -> None:
    logger.add(
        log_file or LOG_DIRECTORY / LOG_FILES["main"],
        level=log_level,
        format=TEXT_FORMAT,
        rotation="10 MB",
        retention="7 days",
    )
    logger.add(LOG_DIRECTORY / LOG_FILES["json"], level=log_level, serialize=True, rotation="10 MB", retention="7 days")
    logger.add(LOG_DIRECTORY / LOG_FILES["errors"], level="ERROR", format=TEXT_FORMAT, backtrace=True, diagnose=True)


def configure_logging(mode: str | None = None, log_level: str = "INFO", log_file: str | None = None) -> None:
    """Configure loguru sinks and route every other logging path into them.

    Args:
        mode: Logging mode (interactive/production), WECHAT2MD_LOG_MODE if None
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Human-readable log path for interactive mode, logs/wechat2md.log if None
    """
    global _active_mode

    mode = mode or get_config().log_mode
    log_level = log_level.upper()

    quiet_libraries()
    setup_structlog()

    root_logger = logging.getLogger()
    root_logger.handlers = [InterceptHandler()]
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    logger.remove()

    if mode == LoggingMode.INTERACTIVE:
        try:
            LOG_DIRECTORY.mkdir(exist_ok=True)
        except OSError:
            # Read-only working directory: keep logging, just not to files
            mode = LoggingMode.PRODUCTION

    if mode == LoggingMode.PRODUCTION:
        _add_stdout_sink(log_level)
    else:
        _add_file_sinks(log_level, log_file)
    _active_mode = mode


def get_logging_status() -> dict[str, Any]:
    """Describe where logs go for the current mode."""
    interactive = current_logging_mode() == LoggingMode.INTERACTIVE

    return {
        "mode": LoggingMode.INTERACTIVE if interactive else LoggingMode.PRODUCTION,
        "log_directory": str(LOG_DIRECTORY.absolute()) if LOG_DIRECTORY.exists() else None,
        "log_files": {
            sink: str(LOG_DIRECTORY / filename) if interactive else None for sink, filename in LOG_FILES.items()
        },
        "third_party_suppressed": list(LIBRARY_LOG_LEVELS),
    }


@contextlib.contextmanager
def suppress_library_output():
    """Swallow anything a library prints to stdout/stderr while the block runs."""
    sink = io.StringIO()
    with contextlib.redirect_stdout(sink), contextlib.redirect_stderr(sink):
        yield
