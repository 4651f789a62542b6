"""Current token rate as seen by the withdrawal policy."""
from fastapi import APIRouter, Depends

from ledger_server.core.container import ApplicationContainer, get_container
from ledger_server.core.errors import UpstreamUnavailableError
from ledger_server.schemas import RateResponse

router = APIRouter()


@router.get("/current", response_model=RateResponse, summary="Cached token rate")
async def current_rate(
    container: ApplicationContainer = Depends(get_container),
) -> RateResponse:
    cache = container.rate_cache
    rate = await cache.get_current_rate()
    if rate is None:
        raise UpstreamUnavailableError("token rate is currently unknown")
    pricing = container.settings.pricing
    return RateResponse(
        token=pricing.token_id,
        currency=pricing.vs_currency,
        rate=rate,
        age_seconds=cache.age(),
        fresh=cache.is_fresh(),
    )
