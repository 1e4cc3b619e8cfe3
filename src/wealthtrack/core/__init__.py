"""Core utilities and shared functionality."""

from wealthtrack.core.timezone import (
    now_local,
    to_local,
    parse_date,
    month_key,
    month_end,
    shift_month,
    iter_months,
)
from wealthtrack.core.concurrency import batch_timeout
from wealthtrack.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    ProviderError,
    RefreshInProgressError,
    ResolutionCancelled,
)

__all__ = [
    "batch_timeout",
    "now_local",
    "to_local",
    "parse_date",
    "month_key",
    "month_end",
    "shift_month",
    "iter_months",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "ProviderError",
    "RefreshInProgressError",
    "ResolutionCancelled",
]
