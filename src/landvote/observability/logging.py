from __future__ import annotations

import logging
from typing import TextIO, cast

import structlog
from structlog.typing import EventDict, WrappedLogger

from landvote.observability.redaction import redact_sensitive


class RedactionProcessor:
    def __call__(self, _: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
        return cast(EventDict, redact_sensitive(dict(event_dict)))


def configure_logging(level: str = "INFO", *, stream: TextIO | None = None) -> None:
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric_level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            RedactionProcessor(),
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = "landvote") -> structlog.stdlib.BoundLogger:
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
