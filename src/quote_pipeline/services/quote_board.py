"""List-view poller: last-known quotes for a watch-list.

Crypto rows refresh on every pass. Other rows refresh while their market is
open, and once per closed-market interval otherwise. A row whose fetch fails
keeps its previous quote instead of going blank.
"""
import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from quote_pipeline.providers.core import QuoteSource
from quote_pipeline.schemas import BatchItem, InstrumentClass, Quote, utcnow
from quote_pipeline.services.market_hours import TradingSessionGate

logger = logging.getLogger(__name__)


class QuoteBoard:
    def __init__(
        self,
        items: Iterable[BatchItem],
        source: QuoteSource,
        gate: TradingSessionGate,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.items = list(items)
        self._source = source
        self._gate = gate
        self._clock = clock
        self._quotes: dict[str, Quote] = {}
        self._last_refresh: dict[str, datetime] = {}

    @property
    def quotes(self) -> dict[str, Quote]:
        """Last-known quote per symbol (possibly stale)."""
        return dict(self._quotes)

    def due_items(self, now: datetime | None = None) -> list[BatchItem]:
        when = now or self._clock()
        due: list[BatchItem] = []
        for item in self.items:
            if item.instrument_class is InstrumentClass.CRYPTO:
                due.append(item)
            elif self._gate.should_refresh(item.instrument_class, item.symbol, when):
                due.append(item)
            else:
                last = self._last_refresh.get(item.symbol)
                if last is None or when - last >= self._gate.closed_interval:
                    due.append(item)
        return due

    async def refresh(self, now: datetime | None = None) -> dict[str, Quote]:
        """Fetch due rows once and merge them into the board."""
        when = now or self._clock()
        due = self.due_items(when)
        if not due:
            return self.quotes
        fresh = await self._source.fetch_batch(due)
        for item in due:
            self._last_refresh[item.symbol] = when
        self._quotes.update(fresh)
        stale = [i.symbol for i in due if i.symbol not in fresh and i.symbol in self._quotes]
        if stale:
            logger.debug("Keeping stale quotes for %s", ", ".join(stale))
        return self.quotes

    async def run(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await self.refresh()
            except Exception as exc:  # pylint: disable=broad-except
                logger.exception("Board refresh failed: %s", exc)
            delay = self._gate.effective_interval(self.items)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=delay.total_seconds())
            except asyncio.TimeoutError:
                pass
