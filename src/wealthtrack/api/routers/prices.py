"""Current price endpoint."""

from fastapi import APIRouter, Depends, Query

from wealthtrack.api.deps import get_price_resolver
from wealthtrack.api.schemas import PriceResponse, PricesResponse
from wealthtrack.core.exceptions import ValidationError
from wealthtrack.core.timezone import to_local
from wealthtrack.services import PriceResolver

router = APIRouter(prefix="/prices", tags=["prices"])


@router.get("/current", response_model=PricesResponse)
def get_current_prices(
    instruments: str = Query(..., description="Comma-separated instrument ids (e.g. VWCE.DE,BTC)"),
    resolver: PriceResolver = Depends(get_price_resolver),
) -> PricesResponse:
    """Resolve current prices; failures come back per instrument as unresolved."""
    ids = [i.strip().upper() for i in instruments.split(",") if i.strip()]
    if not ids:
        raise ValidationError("At least one instrument id is required")

    resolutions = resolver.resolve_current(ids)
    prices = []
    for instrument_id in sorted(resolutions):
        resolution = resolutions[instrument_id]
        snapshot = resolution.snapshot
        prices.append(
            PriceResponse(
                instrument_id=instrument_id,
                status=resolution.status,
                price=snapshot.price if snapshot else None,
                as_of=to_local(snapshot.as_of) if snapshot else None,
                source=snapshot.source if snapshot else None,
                change=snapshot.change if snapshot else None,
                change_percent=snapshot.change_percent if snapshot else None,
                error=resolution.error,
            )
        )
    resolved = sum(1 for p in resolutions.values() if p.is_resolved)
    return PricesResponse(
        prices=prices,
        resolved_count=resolved,
        unresolved_count=len(resolutions) - resolved,
    )
