"""
Structured Logging
structlog over stdlib logging; request trace_id and correlation keys travel as context
"""
from __future__ import annotations

import logging
import re
import sys
from typing import Any, List

import structlog

# third-party loggers that are chatty at INFO
_QUIET_LOGGERS = ("httpx", "httpcore")


class EmailRedactionProcessor:
    """
    Masks the local part of email addresses in every event value.

    Correlation keys are customer emails, so JSON (production) output keeps
    only the domain: ``alice@example.com`` -> ``***@example.com``.
    """

    P_EMAIL = re.compile(r"\b([A-Za-z0-9._%+-]+)@([A-Za-z0-9.-]+\.[A-Za-z]{2,})\b")

    def __call__(self, logger, method_name, event_dict):
        return {k: self._redact(v) for k, v in event_dict.items()}

    def _redact(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.P_EMAIL.sub(lambda m: f"***@{m.group(2)}", value)
        if isinstance(value, dict):
            return {k: self._redact(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._redact(v) for v in value]
        return value


def _processors(json_logs: bool) -> List[Any]:
    chain: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if json_logs:
        chain += [EmailRedactionProcessor(), structlog.processors.JSONRenderer()]
    else:
        chain.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return chain


def configure_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_logs: JSON lines with redacted emails (prod) or coloured console output (dev)
    """
    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=_processors(json_logs),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Module logger, e.g. ``get_logger(__name__).info("Waiter registered", correlation_key=k)``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Replace the request-scoped log context (trace_id, method, path)."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
