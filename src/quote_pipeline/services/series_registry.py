"""Registry of polling tasks: one per subscribed chart series, plus list-view boards.

Every task gets its own stop token so unsubscribing one series never touches
another, and `close()` shuts everything down deterministically.
"""
import asyncio
import logging
import random
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime

from quote_pipeline.providers.core import QuoteSource
from quote_pipeline.schemas import InstrumentClass, SeriesSnapshot, utcnow
from quote_pipeline.services.market_hours import TradingSessionGate
from quote_pipeline.services.price_updater import SeriesUpdater
from quote_pipeline.services.quote_board import QuoteBoard

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeriesHandle:
    """Opaque subscription token returned by `subscribe`."""

    id: str
    symbol: str
    instrument_class: InstrumentClass


@dataclass
class _Subscription:
    updater: SeriesUpdater
    stop_event: asyncio.Event = field(default_factory=asyncio.Event)
    task: asyncio.Task | None = None


@dataclass
class _BoardTask:
    board: QuoteBoard
    stop_event: asyncio.Event = field(default_factory=asyncio.Event)
    task: asyncio.Task | None = None


class SeriesRegistry:
    """Creates, tracks and cancels SeriesUpdater and QuoteBoard loops."""

    def __init__(
        self,
        source: QuoteSource,
        gate: TradingSessionGate,
        *,
        volatility: Mapping[InstrumentClass, float] | None = None,
        rng_factory: Callable[[], random.Random] = random.Random,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._source = source
        self._gate = gate
        self._volatility = volatility
        self._rng_factory = rng_factory
        self._clock = clock
        self._subscriptions: dict[str, _Subscription] = {}
        self._boards: dict[str, _BoardTask] = {}

    def __len__(self) -> int:
        return len(self._subscriptions)

    async def subscribe(
        self,
        symbol: str,
        instrument_class: InstrumentClass,
        interval: str = "15",
    ) -> SeriesHandle:
        """Bootstrap a new series and start its polling loop.

        Raises:
            ValueError: For an unknown chart interval.
        """
        updater = SeriesUpdater(
            symbol,
            instrument_class,
            self._source,
            self._gate,
            interval=interval,
            volatility=self._volatility,
            rng=self._rng_factory(),
            clock=self._clock,
        )
        await updater.bootstrap()
        handle = SeriesHandle(id=uuid.uuid4().hex, symbol=symbol, instrument_class=instrument_class)
        subscription = _Subscription(updater=updater)
        subscription.task = asyncio.create_task(
            updater.run(subscription.stop_event), name=f"series:{symbol}:{handle.id[:8]}"
        )
        self._subscriptions[handle.id] = subscription
        logger.info("Subscribed %s (%s) as %s", symbol, instrument_class.value, handle.id)
        return handle

    async def unsubscribe(self, handle: SeriesHandle | str) -> None:
        """Stop the series' loop, abandoning any in-flight fetch, and drop it.

        Raises:
            KeyError: Unknown handle.
        """
        handle_id = handle.id if isinstance(handle, SeriesHandle) else handle
        subscription = self._subscriptions.pop(handle_id)
        subscription.stop_event.set()
        await cancel_task(subscription.task)
        await subscription.updater.close()
        logger.info("Unsubscribed %s", handle_id)

    def get(self, handle_id: str) -> SeriesUpdater:
        """Updater for a handle. Raises KeyError when unknown."""
        return self._subscriptions[handle_id].updater

    def snapshot(self, handle_id: str) -> SeriesSnapshot:
        return self.get(handle_id).snapshot(handle_id)

    def start_board(self, board: QuoteBoard, name: str | None = None) -> str:
        """Run a list-view board loop under this registry; returns its id."""
        board_id = name or uuid.uuid4().hex
        if board_id in self._boards:
            raise ValueError(f"Board '{board_id}' already running")
        entry = _BoardTask(board=board)
        entry.task = asyncio.create_task(board.run(entry.stop_event), name=f"board:{board_id}")
        self._boards[board_id] = entry
        return board_id

    def board(self, board_id: str) -> QuoteBoard:
        return self._boards[board_id].board

    async def stop_board(self, board_id: str) -> None:
        entry = self._boards.pop(board_id)
        entry.stop_event.set()
        await cancel_task(entry.task)

    async def close(self) -> None:
        """Cancel every series and board. Call from app shutdown."""
        for handle_id in list(self._subscriptions):
            await self.unsubscribe(handle_id)
        for board_id in list(self._boards):
            await self.stop_board(board_id)


async def cancel_task(task: asyncio.Task | None) -> None:
    if task is None or task.done():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
