"""Structured logging built on structlog.

Request-scoped fields (request_id, user_id, path, method) live in structlog's
contextvars store. Middleware binds them once per request and every log line
emitted while handling that request picks them up, including lines from
stdlib loggers routed through the same formatter.

Call configure_logging() once from the process entrypoint. Library code only
ever calls get_logger(__name__).
"""

import logging
import sys

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, get_contextvars

REQUEST_CONTEXT_KEYS = ("request_id", "user_id", "path", "method")

_QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "multipart")


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(json_format: bool = True, level: int = logging.INFO) -> None:
    """Route structlog and stdlib logging through one stdout handler.

    Args:
        json_format: Emit JSON lines (deployed envs) or colored console output (local).
        level: Root log level.
    """
    processors = _shared_processors()
    renderer = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(**fields: str | None) -> None:
    """Attach request fields to every log line for the rest of the request.

    None values are skipped so callers can pass optional fields directly.
    """
    unknown = set(fields) - set(REQUEST_CONTEXT_KEYS)
    if unknown:
        raise ValueError(f"Unknown request context keys: {sorted(unknown)}")
    bind_contextvars(**{k: v for k, v in fields.items() if v is not None})


def clear_request_context() -> None:
    clear_contextvars()


def get_request_id() -> str | None:
    """The current request's correlation ID, if a request is being handled."""
    return get_contextvars().get("request_id")
