"""Dependency injection for FastAPI."""

from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from wealthtrack.config.settings import get_settings
from wealthtrack.providers import (
    CoinGeckoProvider,
    StubMarketDataProvider,
    YahooHistoricalProvider,
    default_transports,
)
from wealthtrack.repositories.sqlalchemy import (
    SqlAlchemyPriceStore,
    SqlAlchemyTransactionRepository,
)
from wealthtrack.repositories.sqlalchemy.database import get_db, get_session_factory
from wealthtrack.services import (
    HistoricalPriceService,
    LedgerService,
    PortfolioService,
    PriceCache,
    PriceResolver,
)

# Process-wide: the resolver's in-flight guard only works if there is one of it
_price_resolver: Optional[PriceResolver] = None
_historical_service: Optional[HistoricalPriceService] = None


def get_transaction_repo(db: Session = Depends(get_db)) -> SqlAlchemyTransactionRepository:
    """Provide TransactionRepository instance."""
    return SqlAlchemyTransactionRepository(db)


def get_price_resolver() -> PriceResolver:
    """Provide the shared PriceResolver (stub providers in offline mode)."""
    global _price_resolver
    if _price_resolver is None:
        settings = get_settings()
        cache = PriceCache(
            SqlAlchemyPriceStore(get_session_factory()),
            ttl_seconds=settings.price_cache_ttl_seconds,
        )
        if settings.use_stub_provider:
            stub = StubMarketDataProvider()
            crypto_provider, transports = stub, [stub]
        else:
            crypto_provider = CoinGeckoProvider(
                vs_currency=settings.crypto_vs_currency,
                timeout_seconds=settings.fetch_timeout_seconds,
            )
            transports = default_transports(settings.fetch_timeout_seconds)
        _price_resolver = PriceResolver(
            cache=cache,
            crypto_provider=crypto_provider,
            security_transports=transports,
            retries=settings.price_retries,
            backoff_seconds=settings.retry_backoff_seconds,
            fetch_timeout_seconds=settings.fetch_timeout_seconds,
            max_workers=settings.max_workers,
        )
    return _price_resolver


def get_historical_service() -> HistoricalPriceService:
    """Provide the shared HistoricalPriceService."""
    global _historical_service
    if _historical_service is None:
        settings = get_settings()
        if settings.use_stub_provider:
            provider = StubMarketDataProvider()
        else:
            provider = YahooHistoricalProvider(vs_currency=settings.crypto_vs_currency)
        _historical_service = HistoricalPriceService(
            provider=provider,
            fetch_timeout_seconds=settings.fetch_timeout_seconds,
            max_workers=settings.max_workers,
        )
    return _historical_service


def reset_services() -> None:
    """Drop shared service instances (for reconfiguration)."""
    global _price_resolver, _historical_service
    _price_resolver = None
    _historical_service = None


def get_ledger_service(
    transaction_repo: SqlAlchemyTransactionRepository = Depends(get_transaction_repo),
) -> LedgerService:
    """Provide LedgerService instance."""
    return LedgerService(transaction_repo=transaction_repo)


def get_portfolio_service(
    transaction_repo: SqlAlchemyTransactionRepository = Depends(get_transaction_repo),
    price_resolver: PriceResolver = Depends(get_price_resolver),
    historical_service: HistoricalPriceService = Depends(get_historical_service),
) -> PortfolioService:
    """Provide PortfolioService instance."""
    settings = get_settings()
    return PortfolioService(
        transaction_repo=transaction_repo,
        price_resolver=price_resolver,
        historical_service=historical_service,
        risk_free_rate=settings.risk_free_rate,
        projection_months=settings.projection_months,
        projection_growth_rate=settings.projection_growth_rate,
    )
