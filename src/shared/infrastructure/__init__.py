"""
Shared Infrastructure Layer
Observability
"""
from src.shared.infrastructure.observability import (
    MetricsCollector,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "MetricsCollector",
]
