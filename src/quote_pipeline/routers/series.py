"""Chart series routes: subscribe, read, unsubscribe and stream."""
from fastapi import APIRouter, HTTPException, Response, WebSocket
from pydantic import BaseModel, ConfigDict, Field, field_validator

from quote_pipeline.dependencies import MarketServiceDep, MarketServiceWs
from quote_pipeline.schemas import InstrumentClass, SeriesSnapshot
from quote_pipeline.services.utils import handle_series_stream

router = APIRouter(prefix="/series", tags=["series"])


class SubscribeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    symbol: str = Field(min_length=1)
    instrument_class: InstrumentClass = Field(alias="type")
    interval: str = "15"

    @field_validator("instrument_class", mode="before")
    @classmethod
    def _parse_label(cls, value: object) -> object:
        return InstrumentClass.parse(value) if isinstance(value, str) else value


@router.post("", response_model=SeriesSnapshot, status_code=201)
async def subscribe(body: SubscribeRequest, service: MarketServiceDep) -> SeriesSnapshot:
    """Start a chart series and return its bootstrapped snapshot."""
    try:
        handle = await service.subscribe(body.symbol, body.instrument_class, body.interval)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return service.get_series(handle)


@router.get("/{handle_id}", response_model=SeriesSnapshot)
async def get_series(handle_id: str, service: MarketServiceDep) -> SeriesSnapshot:
    try:
        return service.get_series(handle_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Series '{handle_id}' not found") from exc


@router.delete("/{handle_id}", status_code=204)
async def unsubscribe(handle_id: str, service: MarketServiceDep) -> Response:
    try:
        await service.unsubscribe(handle_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Series '{handle_id}' not found") from exc
    return Response(status_code=204)


@router.websocket("/{handle_id}/stream")
async def stream_series(websocket: WebSocket, handle_id: str, service: MarketServiceWs) -> None:
    """Push a SeriesSnapshot JSON message after every update of the series."""
    try:
        updater = service.registry.get(handle_id)
    except KeyError:
        await websocket.close(code=4004, reason=f"Series '{handle_id}' not found")
        return
    await handle_series_stream(websocket, updater, handle_id)
