"""API routers package."""

from wealthtrack.api.routers.portfolio import router as portfolio_router
from wealthtrack.api.routers.prices import router as prices_router
from wealthtrack.api.routers.transactions import router as transactions_router

__all__ = [
    "portfolio_router",
    "prices_router",
    "transactions_router",
]
