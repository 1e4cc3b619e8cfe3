"""Service layer - ledger replay, pricing and analytics."""

from wealthtrack.services.ledger_service import LedgerService, TransactionCreate
from wealthtrack.services.ledger_replayer import LedgerReplayer, normalize_record
from wealthtrack.services.price_cache import PriceCache
from wealthtrack.services.price_resolver import PriceResolver
from wealthtrack.services.historical_price_service import HistoricalPriceService, build_month_table
from wealthtrack.services.valuation_builder import MonthlyValuationBuilder
from wealthtrack.services.portfolio_service import PortfolioService

__all__ = [
    "LedgerService",
    "TransactionCreate",
    "LedgerReplayer",
    "normalize_record",
    "PriceCache",
    "PriceResolver",
    "HistoricalPriceService",
    "build_month_table",
    "MonthlyValuationBuilder",
    "PortfolioService",
]
