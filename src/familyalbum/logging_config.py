"""
Structured logging setup for the familyalbum application.

All modules log through structlog with snake_case event names and keyword
context. Development runs get a console renderer, everything else emits JSON.
"""

import logging
import os
import sys
from typing import Any

import structlog

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_configured = False


def get_log_level() -> int:
    """
    Get log level from the LOG_LEVEL environment variable.

    Returns:
        int: Log level constant from the logging module (INFO when unset or unknown)
    """
    return _LEVELS.get(os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)


def is_development_environment() -> bool:
    """Check if running in a development environment."""
    return os.getenv("ENVIRONMENT", "development").lower() in ["development", "dev", "local", "test"]


def configure_structured_logging(force: bool = False) -> None:
    """
    Configure structlog and the standard library root logger.

    Streamlit re-executes the entry script on every interaction, so repeated
    calls are ignored unless ``force`` is set.

    Args:
        force: Reconfigure even if logging was already set up
    """
    global _configured
    if _configured and not force:
        return

    log_level = get_log_level()
    is_dev = is_development_environment()

    logging.basicConfig(level=log_level, format="%(message)s", stream=sys.stderr)

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if is_dev:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.getLogger().setLevel(log_level)
    _configured = True

    structlog.get_logger("familyalbum.logging").info(
        "logging_configured",
        log_level=logging.getLevelName(log_level),
        environment="development" if is_dev else "production",
    )


def get_logger(name: str | None = None) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (defaults to the calling module)

    Returns:
        structlog.BoundLogger: Configured logger instance
    """
    if name is None:
        import inspect

        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")

    return structlog.get_logger(name)


def log_performance(operation: str, duration: float, **context: Any) -> None:
    """Log how long an operation took, in seconds."""
    get_logger("familyalbum.performance").info(
        "performance_metric", operation=operation, duration_seconds=duration, **context
    )


def log_user_action(user_id: str, action: str, **context: Any) -> None:
    """
    Log user actions for the audit trail.

    Args:
        user_id: User identifier
        action: Action performed (e.g. "photo_uploaded")
        **context: Additional context information
    """
    get_logger("familyalbum.user_actions").info("user_action", user_id=user_id, action=action, **context)


def log_error(error: Exception, context: dict[str, Any] | None = None) -> None:
    """
    Log an exception with structured context.

    Args:
        error: Exception that occurred
        context: Additional context information
    """
    error_context: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    if context:
        error_context.update(context)

    get_logger("familyalbum.errors").error("error_occurred", **error_context, exc_info=error)


def log_security_event(event_type: str, user_id: str | None = None, **context: Any) -> None:
    """Log security-related events such as failed sign-ins or denied pages."""
    get_logger("familyalbum.security").warning("security_event", event_type=event_type, user_id=user_id, **context)


class LogContext:
    """Context manager that binds structured context to a logger."""

    def __init__(self, logger: Any, **context: Any):
        self.logger = logger
        self.context = context
        self.bound_logger: Any = None

    def __enter__(self) -> Any:
        self.bound_logger = self.logger.bind(**self.context)
        return self.bound_logger

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if exc_type is not None and self.bound_logger is not None:
            self.bound_logger.error(
                "context_exception", exception_type=exc_type.__name__, exception_message=str(exc_val), exc_info=exc_val
            )


def log_context(**context: Any) -> LogContext:
    """
    Create a logging context manager.

    Args:
        **context: Context variables added to every message logged inside the block

    Returns:
        LogContext: Context manager yielding the bound logger
    """
    return LogContext(get_logger(), **context)
