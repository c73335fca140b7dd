"""Shared core utilities for the backend and the console.

Provides pricing, order statuses, health checks and structured logging.
"""

from .health import ServiceHealth, HealthStatus, database_check, http_dependency_check
from .logging_config import (
    setup_logging,
    get_logger,
    RequestLoggingMiddleware,
    set_request_context,
    generate_request_id,
    LoggerAdapter,
)
from .order_status import OrderStatus
from .pricing import OrderTotals, compute_order_totals, effective_item_price, format_money, format_percent

__all__ = [
    # Health checks
    "ServiceHealth",
    "HealthStatus",
    "database_check",
    "http_dependency_check",
    # Logging
    "setup_logging",
    "get_logger",
    "RequestLoggingMiddleware",
    "set_request_context",
    "generate_request_id",
    "LoggerAdapter",
    # Orders
    "OrderStatus",
    "OrderTotals",
    "compute_order_totals",
    "effective_item_price",
    "format_money",
    "format_percent",
]
