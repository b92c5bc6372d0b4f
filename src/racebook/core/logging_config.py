"""Structured logging for the API.

All modules log through ``logging.getLogger(__name__)``; structlog renders
those records (JSON in production, console in development) and merges the
per-request context bound here: the request id from the middleware and the
user id once the bearer token has been verified.
"""

import logging
import uuid

import structlog

# Per-request HTTP chatter from the Supabase transport and the ASGI server.
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "hpack")


def _processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def setup_logging(json_output: bool = True, log_level: str = "INFO") -> None:
    """Route stdlib and structlog output through one rendering handler.

    Args:
        json_output: JSON lines when True, coloured console output otherwise.
        log_level: Root level name; unknown names fall back to INFO.
    """
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            foreign_pre_chain=_processors(),
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def generate_request_id() -> str:
    """Generate a short unique request ID."""
    return uuid.uuid4().hex[:12]


def bind_request(request_id: str, method: str, path: str) -> None:
    """Start a fresh log context for one request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, method=method, path=path)


def bind_user(user_id: str) -> None:
    """Tag the rest of the request's log lines with the authenticated user."""
    if user_id:
        structlog.contextvars.bind_contextvars(user_id=user_id)


def clear_request() -> None:
    structlog.contextvars.clear_contextvars()
