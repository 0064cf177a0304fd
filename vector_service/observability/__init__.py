"""
Observability module.

Logging configuration, correlation IDs and request middleware.
"""

from vector_service.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from vector_service.observability.logger import configure_logging

__all__ = [
    "clear_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "set_correlation_id",
]
