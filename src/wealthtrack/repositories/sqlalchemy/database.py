"""Database connection and session management."""

from typing import Generator, Optional

from sqlalchemy import create_engine, Engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from wealthtrack.config.settings import get_settings

Base = declarative_base()

# Module-level database state (rebuilt by reset_database)
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    # Request threads and resolver workers share connections
    options = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # One connection, or every session would see its own empty database
        options["poolclass"] = StaticPool
    return options


def get_engine() -> Engine:
    """Get or create the engine for settings.get_database_url()."""
    global _engine
    if _engine is None:
        url = get_settings().get_database_url()
        _engine = create_engine(url, echo=False, **_engine_options(url))
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=get_engine(),
        )
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the ledger and price snapshot tables."""
    from wealthtrack.repositories.sqlalchemy import orm_models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def reset_database() -> None:
    """Dispose the engine so the next call picks up new settings."""
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()

    _engine = None
    _SessionLocal = None
