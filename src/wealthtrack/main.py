"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from wealthtrack import __version__
from wealthtrack.config.settings import get_settings
from wealthtrack.config.logging_config import setup_logging
from wealthtrack.repositories.sqlalchemy.database import init_db
from wealthtrack.api.routers import portfolio_router, prices_router, transactions_router
from wealthtrack.core.exceptions import AppError, NotFoundError, RefreshInProgressError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    init_db()
    yield
    # Shutdown (nothing to clean up)


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Portfolio valuation and performance analytics from a transaction ledger",
    version=__version__,
    lifespan=lifespan,
)

# Include routers
app.include_router(transactions_router)
app.include_router(portfolio_router)
app.include_router(prices_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    status_code = status.HTTP_400_BAD_REQUEST
    if isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, RefreshInProgressError):
        status_code = status.HTTP_409_CONFLICT
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }
