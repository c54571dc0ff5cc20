# ABOUTME: Logging configuration, request context and CLI progress display
# ABOUTME: Structured logging via structlog, sinks via loguru, spinners via rich

from .config import LoggingMode, configure_logging, get_logging_status, suppress_library_output
from .progress import ExtractionProgress, create_smart_progress
from .utils import (
    LogContext,
    get_logger,
    log_extraction_step,
    with_async_operation_context,
    with_request_context,
)

__all__ = [
    "ExtractionProgress",
    "LogContext",
    "LoggingMode",
    "configure_logging",
    "create_smart_progress",
    "get_logger",
    "get_logging_status",
    "log_extraction_step",
    "suppress_library_output",
    "with_async_operation_context",
    "with_request_context",
]
