"""Trading-session routes: open/closed status and polling intervals."""
from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from quote_pipeline.dependencies import MarketServiceDep
from quote_pipeline.schemas import MarketStatus
from quote_pipeline.services.utils import parse_symbols_param

router = APIRouter(prefix="/markets", tags=["markets"])


class IntervalResponse(BaseModel):
    interval_seconds: float


@router.get("/hours", response_model=MarketStatus)
async def get_market_hours(
    service: MarketServiceDep,
    type: str = Query(..., description="crypto | equity | equity_br | index"),  # pylint: disable=redefined-builtin
    symbol: str = Query(default="", description="Needed for indices, e.g. INDEX:SPX"),
) -> MarketStatus:
    """Whether the instrument's market is trading right now."""
    return service.is_market_open(type, symbol)


@router.get("/interval", response_model=IntervalResponse)
async def get_update_interval(
    service: MarketServiceDep,
    type: str = Query(...),  # pylint: disable=redefined-builtin
    symbol: str = Query(default=""),
) -> IntervalResponse:
    """Recommended polling interval for one instrument."""
    interval = service.get_update_interval(type, symbol)
    return IntervalResponse(interval_seconds=interval.total_seconds())


@router.get("/effective-interval", response_model=IntervalResponse)
async def get_effective_interval(request: Request, service: MarketServiceDep) -> IntervalResponse:
    """Polling interval for a watch-list: the shortest across its instruments.

    Pass ?symbols=BINANCE:BTCUSDT|crypto,NASDAQ:AAPL|equity; without a
    `|type` suffix the class is inferred from the venue prefix.
    """
    items = parse_symbols_param(request.query_params)
    if not items:
        raise HTTPException(
            status_code=400,
            detail="Query param 'symbols' required (e.g. ?symbols=BINANCE:BTCUSDT|crypto)",
        )
    interval = service.get_effective_interval(items)
    return IntervalResponse(interval_seconds=interval.total_seconds())
