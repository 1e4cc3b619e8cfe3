"""
Pytest configuration and fixtures for the valuation and analytics tests.

This module provides:
- In-memory SQLite database fixtures
- Factory helpers for ledger transactions
- Deterministic fake price providers and a controllable clock
- Service and repository fixtures
"""

import threading
import uuid
from datetime import date, datetime, timedelta
from typing import Callable, Optional

import pytest
import pytz
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from wealthtrack.main import app
from wealthtrack.api.deps import get_historical_service, get_price_resolver, reset_services
from wealthtrack.repositories.sqlalchemy.database import Base, get_db, reset_database
# Import ORM models to register them with Base before creating tables
from wealthtrack.repositories.sqlalchemy import orm_models  # noqa: F401
from wealthtrack.repositories.sqlalchemy import (
    SqlAlchemyPriceStore,
    SqlAlchemyTransactionRepository,
)
from wealthtrack.repositories import InMemoryPriceStore, InMemoryTransactionRepository
from wealthtrack.providers import StubMarketDataProvider
from wealthtrack.providers.market_data_provider import RawHistoryPoint, RawQuote
from wealthtrack.core.exceptions import ProviderError
from wealthtrack.domain.models import PriceSnapshot, Transaction, TransactionKind
from wealthtrack.services import (
    HistoricalPriceService,
    LedgerService,
    PortfolioService,
    PriceCache,
    PriceResolver,
)
from wealthtrack.config.settings import Settings, reset_settings, set_settings


# =============================================================================
# TIME HELPERS
# =============================================================================


class FakeClock:
    """Controllable clock for TTL tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return pytz.utc.localize(datetime(2024, 6, 15, 12, 30, 0))


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def today() -> date:
    """Fixed 'today' used as the end of every valuation series."""
    return date(2024, 6, 15)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session_factory(test_engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def test_session(test_session_factory) -> Session:
    """Create test database session."""
    session = test_session_factory()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def transaction_repo(test_session) -> SqlAlchemyTransactionRepository:
    """Provide test TransactionRepository."""
    return SqlAlchemyTransactionRepository(test_session)


@pytest.fixture
def sql_price_store(test_session_factory) -> SqlAlchemyPriceStore:
    return SqlAlchemyPriceStore(test_session_factory)


@pytest.fixture
def memory_repo() -> InMemoryTransactionRepository:
    return InMemoryTransactionRepository()


@pytest.fixture
def price_store() -> InMemoryPriceStore:
    return InMemoryPriceStore()


# =============================================================================
# MARKET DATA FIXTURES
# =============================================================================


class FakeCryptoProvider:
    """Batch crypto provider returning fixed prices; counts calls."""

    name = "fake-crypto"

    def __init__(self, prices: Optional[dict[str, float]] = None, fail: bool = False):
        self.prices = prices if prices is not None else {"BTC": 58200.0, "ETH": 2950.0}
        self.fail = fail
        self.calls: list[list[str]] = []

    def get_quotes(self, instrument_ids: list[str]) -> dict[str, RawQuote]:
        self.calls.append(list(instrument_ids))
        if self.fail:
            raise ProviderError(self.name, "service unavailable")
        return {
            i: {"price": self.prices[i], "asOf": "2024-06-15T12:30:00+00:00"}
            for i in instrument_ids
            if i in self.prices
        }


class FakeTransport:
    """
    Security transport with scripted behavior.

    `failures` is the number of calls that raise before calls start to succeed;
    tickers missing from `prices` always fail.
    """

    def __init__(
        self,
        name: str = "fake-transport",
        prices: Optional[dict[str, float]] = None,
        failures: int = 0,
    ):
        self.name = name
        self.prices = prices if prices is not None else {"AAPL": 185.5, "VWCE.DE": 118.4}
        self.failures = failures
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def fetch_quote(self, ticker: str) -> RawQuote:
        with self._lock:
            self.calls.append(ticker)
            if self.failures > 0:
                self.failures -= 1
                raise ProviderError(self.name, f"{ticker}: HTTP 429")
        if ticker not in self.prices:
            raise ProviderError(self.name, f"{ticker}: not found")
        return {"price": self.prices[ticker], "change": 1.0, "changePercent": 0.5}


class StalledTransport:
    """Transport that blocks on one ticker until released."""

    name = "stalled"

    def __init__(self, stalled_ticker: str, prices: dict[str, float]):
        self.stalled_ticker = stalled_ticker
        self.prices = prices
        self.release = threading.Event()
        self.started = threading.Event()

    def fetch_quote(self, ticker: str) -> RawQuote:
        if ticker == self.stalled_ticker:
            self.started.set()
            self.release.wait(timeout=5)
            raise ProviderError(self.name, f"{ticker}: stalled")
        return {"price": self.prices[ticker]}


class FakeHistoricalProvider:
    """Historical provider serving fixed raw series; listed ids raise."""

    def __init__(
        self,
        series: Optional[dict[str, list[RawHistoryPoint]]] = None,
        failing: tuple[str, ...] = (),
    ):
        self.series = series or {}
        self.failing = set(failing)
        self.calls: list[str] = []

    def get_history(self, instrument_id: str, start: date, end: date) -> list[RawHistoryPoint]:
        self.calls.append(instrument_id)
        if instrument_id in self.failing:
            raise ProviderError("fake-history", f"{instrument_id}: unavailable")
        return list(self.series.get(instrument_id, []))


class RecordingSleep:
    """Replacement for time.sleep that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def crypto_provider() -> FakeCryptoProvider:
    return FakeCryptoProvider()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def market_provider() -> StubMarketDataProvider:
    """Provide stub provider with fixed seed."""
    return StubMarketDataProvider(seed=42)


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def price_cache(price_store, clock) -> PriceCache:
    return PriceCache(price_store, ttl_seconds=1800, now=clock)


@pytest.fixture
def price_resolver(price_cache, crypto_provider, transport, sleep, clock) -> PriceResolver:
    return PriceResolver(
        cache=price_cache,
        crypto_provider=crypto_provider,
        security_transports=[transport],
        sleep=sleep,
        now=clock,
        fetch_timeout_seconds=2.0,
    )


@pytest.fixture
def ledger_service(transaction_repo) -> LedgerService:
    """Provide test LedgerService."""
    return LedgerService(transaction_repo=transaction_repo)


def build_portfolio_service(
    repo,
    history: Optional[dict[str, list[RawHistoryPoint]]] = None,
    current: Optional[dict[str, float]] = None,
    today: date = date(2024, 6, 15),
) -> PortfolioService:
    """PortfolioService over fake providers with a fixed 'today'."""
    now = pytz.utc.localize(datetime(today.year, today.month, today.day, 12, 0))
    resolver = PriceResolver(
        cache=PriceCache(InMemoryPriceStore(), now=lambda: now),
        crypto_provider=FakeCryptoProvider(prices={}),
        security_transports=[FakeTransport(prices=current or {})],
        retries=0,
        sleep=lambda _: None,
        now=lambda: now,
    )
    return PortfolioService(
        transaction_repo=repo,
        price_resolver=resolver,
        historical_service=HistoricalPriceService(FakeHistoricalProvider(history)),
        today=lambda: today,
    )


# =============================================================================
# TRANSACTION HELPERS (exported for use in tests)
# =============================================================================


def make_buy(
    instrument_id: str,
    quantity: float,
    unit_price: float,
    occurred_at: date,
    commission: float = 0.0,
    category: str = "Equity",
    txn_id: Optional[str] = None,
) -> Transaction:
    """Helper to create a non-cash BUY."""
    return Transaction(
        txn_id=txn_id or uuid.uuid4().hex,
        instrument_id=instrument_id,
        occurred_at=occurred_at,
        kind=TransactionKind.BUY,
        quantity=quantity,
        unit_price=unit_price,
        commission=commission,
        category=category,
    )


def make_sell(
    instrument_id: str,
    quantity: float,
    unit_price: float,
    occurred_at: date,
    commission: float = 0.0,
    category: str = "Equity",
    txn_id: Optional[str] = None,
) -> Transaction:
    """Helper to create a non-cash SELL."""
    return Transaction(
        txn_id=txn_id or uuid.uuid4().hex,
        instrument_id=instrument_id,
        occurred_at=occurred_at,
        kind=TransactionKind.SELL,
        quantity=quantity,
        unit_price=unit_price,
        commission=commission,
        category=category,
    )


def deposit(amount: float, occurred_at: date, account: str = "BANK", txn_id: Optional[str] = None) -> Transaction:
    """Helper to create a cash deposit (cash BUY of amount units at 1)."""
    return Transaction(
        txn_id=txn_id or uuid.uuid4().hex,
        instrument_id=account,
        occurred_at=occurred_at,
        kind=TransactionKind.BUY,
        quantity=amount,
        unit_price=1.0,
        is_cash=True,
        category="Cash",
    )


def withdraw(amount: float, occurred_at: date, account: str = "BANK", txn_id: Optional[str] = None) -> Transaction:
    """Helper to create a cash withdrawal (cash SELL)."""
    return Transaction(
        txn_id=txn_id or uuid.uuid4().hex,
        instrument_id=account,
        occurred_at=occurred_at,
        kind=TransactionKind.SELL,
        quantity=amount,
        unit_price=1.0,
        is_cash=True,
        category="Cash",
    )


def snapshot(instrument_id: str, price: float, as_of: datetime, source: str = "test") -> PriceSnapshot:
    return PriceSnapshot(instrument_id=instrument_id, price=price, as_of=as_of, source=source)


def monthly_history(prices: dict[str, float]) -> list[RawHistoryPoint]:
    """Raw series with one observation on the first of each YYYY-MM key."""
    return [{"date": f"{key}-01", "price": price} for key, price in prices.items()]


def assert_close(actual: float, expected: float, tolerance: float = 1e-6) -> None:
    """Assert two floats are equal within tolerance."""
    diff = abs(actual - expected)
    assert diff <= tolerance, f"Expected {expected}, got {actual} (diff={diff})"


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def client(test_engine, test_session_factory, clock) -> TestClient:
    """Provide FastAPI test client with test database and offline providers."""
    # Keep the app lifespan off the default on-disk database
    set_settings(Settings(database_url="sqlite://"))
    reset_database()
    stub = StubMarketDataProvider(seed=42)
    resolver = PriceResolver(
        cache=PriceCache(SqlAlchemyPriceStore(test_session_factory), now=clock),
        crypto_provider=stub,
        security_transports=[stub],
        sleep=lambda _: None,
    )
    historical = HistoricalPriceService(stub)

    def override_get_db():
        session = test_session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_price_resolver] = lambda: resolver
    app.dependency_overrides[get_historical_service] = lambda: historical
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    reset_services()
    reset_database()
    reset_settings()
