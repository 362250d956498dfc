"""WebSocket stream handling: push SeriesSnapshots of one subscribed series."""
import asyncio
import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from quote_pipeline.schemas import BatchItem, InstrumentClass
from quote_pipeline.services.price_updater import SeriesUpdater
from quote_pipeline.services.series_registry import cancel_task

logger = logging.getLogger(__name__)


def parse_symbols_param(query_params: Any, default_class: str | None = None) -> list[BatchItem]:
    """Parse 'symbols' query param of the form SYMBOL[|type],... into batch items.

    Without an explicit type the class is inferred from the venue prefix.
    """
    raw = (query_params.get("symbols") or "").strip()
    items: list[BatchItem] = []
    for part in (p.strip() for p in raw.split(",")):
        if not part:
            continue
        symbol, _, label = part.partition("|")
        label = label or default_class
        klass = InstrumentClass.parse(label) if label else InstrumentClass.infer(symbol)
        items.append(BatchItem(symbol=symbol.strip(), instrument_class=klass))
    return items


async def handle_series_stream(
    websocket: WebSocket,
    updater: SeriesUpdater,
    handle_id: str,
) -> None:
    """Accept the WebSocket, send the current snapshot, then one per update.

    Ends with close code 1000 once the series is unsubscribed, or as soon as the
    client disconnects. Other clients watching the same series are unaffected.
    """
    await websocket.accept()
    forwarder = asyncio.create_task(_forward_snapshots(websocket, updater, handle_id))
    listener = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        await asyncio.wait({forwarder, listener}, return_when=asyncio.FIRST_COMPLETED)
        if forwarder.done():
            forwarder.result()
            await websocket.close(code=1000, reason="Series unsubscribed")
        else:
            logger.debug("Series stream client disconnected")
    except WebSocketDisconnect:
        logger.debug("Series stream client disconnected")
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Series stream error: %s", exc)
        try:
            await websocket.close(code=1011, reason="Stream error")
        except Exception:  # pylint: disable=broad-except
            logger.debug("WebSocket already closed")
    finally:
        await cancel_task(forwarder)
        await cancel_task(listener)


async def _forward_snapshots(websocket: WebSocket, updater: SeriesUpdater, handle_id: str) -> None:
    await websocket.send_json(updater.snapshot(handle_id).model_dump(mode="json"))
    async for snapshot in updater.updates(handle_id):
        await websocket.send_json(snapshot.model_dump(mode="json"))


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Client messages are ignored; only the disconnect matters.
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return
