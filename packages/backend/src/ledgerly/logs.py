"""structlog setup.

Console rendering in development, one JSON object per line elsewhere.
Request-scoped values (request_id, user_id) are bound through
structlog.contextvars by the middleware and the identity gate, and
merged into every event.
"""

import logging

import structlog

from ledgerly.config import settings


def configure_logging() -> None:
    level = logging.DEBUG if settings.debug else logging.INFO
    if settings.environment == "development":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
