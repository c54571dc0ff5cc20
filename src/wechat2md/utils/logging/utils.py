# ABOUTME: structlog helpers: logger lookup, request-scoped context and timing decorators
# ABOUTME: Context is bound through structlog contextvars so nested fetch and parse logs inherit it

import functools
import inspect
import time
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from structlog.contextvars import bind_contextvars, bound_contextvars, reset_contextvars

F = TypeVar("F", bound=Callable[..., Any])


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after ``name`` or, by default, the calling module."""
    if name is None:
        caller = inspect.currentframe()
        caller = caller.f_back if caller else None
        name = caller.f_globals.get("__name__") if caller else None

    return structlog.get_logger(name or "wechat2md")


def generate_operation_id() -> str:
    """Short random id correlating every log line of one operation."""
    return uuid.uuid4().hex[:8]


def _first_url(args: tuple, kwargs: dict) -> str | None:
    if isinstance(kwargs.get("url"), str):
        return kwargs["url"]
    return next((arg for arg in args if isinstance(arg, str) and arg.startswith(("http://", "https://"))), None)


def with_async_operation_context(operation: str, **context) -> Callable[[F], F]:
    """Log start, completion and failure of a service coroutine.

    The operation id is bound as a context variable for the duration of the call,
    so logs emitted further down the stack carry it too.

    Args:
        operation: Operation name for logging
        **context: Additional context to bind to logger
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            logger = get_logger(func.__module__)

            with bound_contextvars(operation=operation, operation_id=generate_operation_id(), **context):
                logger.info(f"Starting {operation}")
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    logger.error(
                        f"Failed {operation}",
                        duration_seconds=round(time.perf_counter() - started, 3),
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    raise

                logger.info(f"Completed {operation}", duration_seconds=round(time.perf_counter() - started, 3))
                return result

        return wrapper  # type: ignore[return-value]

    return decorator


def log_extraction_step(step_name: str) -> Callable[[F], F]:
    """Log one per-URL step, binding the first URL argument as ``url``.

    Failures are logged at warning level since batch callers turn them into skips.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            logger = get_logger(func.__module__).bind(step=step_name, url=_first_url(args, kwargs))

            logger.debug(f"Starting {step_name}")
            started = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.warning(
                    f"Failed {step_name}",
                    duration_seconds=round(time.perf_counter() - started, 3),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

            logger.info(
                f"Completed {step_name}",
                duration_seconds=round(time.perf_counter() - started, 3),
                title=getattr(result, "title", None),
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


class LogContext:
    """Bind request context for a ``with`` block and log the block's failure, if any."""

    def __init__(self, logger: structlog.stdlib.BoundLogger, **context):
        self.logger = logger
        self.context = context
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> structlog.stdlib.BoundLogger:
        self._tokens = bind_contextvars(**self.context)
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.logger.error("Request failed", error=str(exc_val), error_type=exc_type.__name__)
        reset_contextvars(**self._tokens)


def with_request_context(command: str, **context) -> LogContext:
    """Logging context for one CLI command or boundary request."""
    return LogContext(get_logger("wechat2md.request"), command=command, request_id=generate_operation_id(), **context)
