"""Public facade over the pipeline, consumed by presentation code and the HTTP routers.

MarketService ties together the batch orchestrator, the trading-session gate
and the series registry. Instrument classes are parsed once here, at the
boundary, and passed explicitly from then on.
"""
from collections.abc import Iterable
from datetime import datetime, timedelta

from quote_pipeline.schemas import (BatchItem, InstrumentClass, MarketStatus,
                                    Quote, SeriesSnapshot)
from quote_pipeline.services.batch_orchestrator import BatchOrchestrator
from quote_pipeline.services.market_hours import TradingSessionGate
from quote_pipeline.services.quote_board import QuoteBoard
from quote_pipeline.services.series_registry import (SeriesHandle,
                                                     SeriesRegistry)

ItemLike = BatchItem | tuple[str, "str | InstrumentClass"]


def _as_item(item: ItemLike) -> BatchItem:
    if isinstance(item, BatchItem):
        return item
    symbol, instrument_class = item
    return BatchItem.of(symbol, instrument_class)


class MarketService:
    """Single entry point for quotes, market hours and chart series."""

    def __init__(
        self,
        orchestrator: BatchOrchestrator,
        gate: TradingSessionGate,
        registry: SeriesRegistry,
    ) -> None:
        self._orchestrator = orchestrator
        self._gate = gate
        self._registry = registry

    @property
    def gate(self) -> TradingSessionGate:
        return self._gate

    @property
    def registry(self) -> SeriesRegistry:
        return self._registry

    # ---- Quotes ----
    async def fetch_quote(
        self, symbol: str, instrument_class: str | InstrumentClass
    ) -> Quote | None:
        return await self._orchestrator.fetch_quote(symbol, InstrumentClass.parse(instrument_class))

    async def fetch_batch(self, items: Iterable[ItemLike]) -> dict[str, Quote]:
        """Partial map; callers must tolerate fewer entries than requested."""
        return await self._orchestrator.fetch_batch([_as_item(i) for i in items])

    def metrics(self) -> dict[str, int]:
        return self._orchestrator.metrics()

    # ---- Market hours ----
    def is_market_open(
        self,
        instrument_class: str | InstrumentClass,
        symbol: str = "",
        now: datetime | None = None,
    ) -> MarketStatus:
        return self._gate.is_open(InstrumentClass.parse(instrument_class), symbol, now)

    def get_update_interval(
        self,
        instrument_class: str | InstrumentClass,
        symbol: str = "",
        now: datetime | None = None,
    ) -> timedelta:
        return self._gate.update_interval(InstrumentClass.parse(instrument_class), symbol, now)

    def get_effective_interval(
        self, items: Iterable[ItemLike], now: datetime | None = None
    ) -> timedelta:
        return self._gate.effective_interval([_as_item(i) for i in items], now)

    # ---- Series ----
    async def subscribe(
        self,
        symbol: str,
        instrument_class: str | InstrumentClass,
        interval: str = "15",
    ) -> SeriesHandle:
        return await self._registry.subscribe(symbol, InstrumentClass.parse(instrument_class), interval)

    async def unsubscribe(self, handle: SeriesHandle | str) -> None:
        await self._registry.unsubscribe(handle)

    def get_series(self, handle: SeriesHandle | str) -> SeriesSnapshot:
        handle_id = handle.id if isinstance(handle, SeriesHandle) else handle
        return self._registry.snapshot(handle_id)

    # ---- Watch-lists ----
    def watch(self, items: Iterable[ItemLike], name: str | None = None) -> str:
        """Start a background board for a watch-list; returns the board id."""
        board = QuoteBoard([_as_item(i) for i in items], self._orchestrator, self._gate)
        return self._registry.start_board(board, name)

    def board_quotes(self, board_id: str) -> dict[str, Quote]:
        return self._registry.board(board_id).quotes

    async def close(self) -> None:
        """Stop every loop, then close adapter clients. Call from app shutdown."""
        await self._registry.close()
        await self._orchestrator.close()
