"""Quote routes: one instrument via query params, many via a JSON body."""
import logging

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from quote_pipeline.dependencies import MarketServiceDep
from quote_pipeline.schemas import BatchItem, InstrumentClass, Quote

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/market-data", tags=["market-data"])


class BatchRequest(BaseModel):
    symbols: list[BatchItem] = Field(min_length=1, max_length=500)


class BatchResponse(BaseModel):
    success: bool = True
    data: dict[str, Quote]
    count: int


@router.get("", response_model=Quote)
async def get_quote(
    service: MarketServiceDep,
    symbol: str = Query(..., min_length=1, description="Canonical symbol, e.g. BINANCE:BTCUSDT"),
    type: str = Query("", description="crypto | equity | equity_br | index; inferred from the venue when omitted"),  # pylint: disable=redefined-builtin
) -> Quote:
    """Get the current quote for one instrument.

    Returns 404 when no upstream produced a valid quote.
    """
    instrument_class = InstrumentClass.parse(type) if type.strip() else InstrumentClass.infer(symbol)
    quote = await service.fetch_quote(symbol, instrument_class)
    if quote is None:
        raise HTTPException(status_code=404, detail=f"No quote available for '{symbol}'")
    return quote


@router.post("", response_model=BatchResponse)
async def get_quotes(body: BatchRequest, service: MarketServiceDep) -> BatchResponse:
    """Get quotes for many instruments.

    Symbols that failed are omitted from `data`; the request itself never fails
    because of them.
    """
    data = await service.fetch_batch(body.symbols)
    logger.debug("Batch route: %d/%d quotes", len(data), len(body.symbols))
    return BatchResponse(data=data, count=len(data))
