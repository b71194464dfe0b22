"""
Shared Observability Infrastructure
Logging and metrics
"""
from src.shared.infrastructure.observability.logger import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)
from src.shared.infrastructure.observability.metrics import MetricsCollector

__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "MetricsCollector",
]
