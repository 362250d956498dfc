"""Batched multi-symbol fetch across venue adapters.

Requests fan out in fixed-size chunks; each chunk is awaited as a whole and a
fixed delay separates consecutive chunks to stay under upstream rate limits.
Individual failures are counted and dropped, never raised.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import asdict, dataclass
from datetime import datetime

from quote_pipeline.providers.core import VenueAdapterABC
from quote_pipeline.schemas import BatchItem, InstrumentClass, Quote

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 15
DEFAULT_INTER_BATCH_DELAY = 0.2


@dataclass
class BatchStats:
    """Success/failure counters, cumulative and for the last batch."""

    batches: int = 0
    requested: int = 0
    succeeded: int = 0
    failed: int = 0
    last_batch_requested: int = 0
    last_batch_succeeded: int = 0
    last_batch_failed: int = 0


class BatchOrchestrator:
    """Dispatches (symbol, class) lookups to the adapter registered for each class."""

    def __init__(
        self,
        adapters: Mapping[InstrumentClass, VenueAdapterABC],
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        inter_batch_delay: float = DEFAULT_INTER_BATCH_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            adapters: Adapter per instrument class.
            chunk_size: Max concurrent requests per chunk.
            inter_batch_delay: Seconds to wait between chunks (not after the last).
            sleep: Awaitable sleep; injectable for tests.

        Raises:
            ValueError: chunk_size below 1, or an adapter registered for a class
                outside its supported_classes.
        """
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        for instrument_class, adapter in adapters.items():
            if instrument_class not in adapter.supported_classes:
                raise ValueError(f"{type(adapter).__name__} does not serve {instrument_class.value}")
        self._adapters = dict(adapters)
        self.chunk_size = chunk_size
        self.inter_batch_delay = inter_batch_delay
        self._sleep = sleep
        self._stats = BatchStats()
        self._last_timestamp: dict[str, datetime] = {}

    async def fetch_quote(self, symbol: str, instrument_class: InstrumentClass) -> Quote | None:
        """Fetch one quote through the adapter for its class."""
        adapter = self._adapters.get(instrument_class)
        if adapter is None:
            logger.warning("No adapter configured for %s (%s)", instrument_class.value, symbol)
            return None
        quote = await adapter.fetch(symbol, instrument_class)
        if quote is None or quote.price <= 0:
            return None
        return self._stamp(quote)

    async def fetch_batch(self, items: Iterable[BatchItem]) -> dict[str, Quote]:
        """Fetch quotes for every item; the result omits symbols without a valid quote."""
        unique = _dedupe(items)
        results: dict[str, Quote] = {}
        succeeded = failed = 0

        for start in range(0, len(unique), self.chunk_size):
            chunk = unique[start : start + self.chunk_size]
            outcomes = await asyncio.gather(
                *(self.fetch_quote(i.symbol, i.instrument_class) for i in chunk),
                return_exceptions=True,
            )
            for item, outcome in zip(chunk, outcomes):
                if isinstance(outcome, Quote) and outcome.price > 0:
                    results[item.symbol] = outcome
                    succeeded += 1
                    continue
                failed += 1
                if isinstance(outcome, BaseException):
                    logger.error(
                        "Unexpected error fetching %s (%s): %r",
                        item.symbol,
                        item.instrument_class.value,
                        outcome,
                    )
            if start + self.chunk_size < len(unique):
                await self._sleep(self.inter_batch_delay)

        self._record(len(unique), succeeded, failed)
        logger.info(
            "Batch done: requested=%d succeeded=%d failed=%d",
            len(unique),
            succeeded,
            failed,
        )
        return results

    def metrics(self) -> dict[str, int]:
        return asdict(self._stats)

    async def close(self) -> None:
        """Close every adapter. Call from app shutdown."""
        for adapter in set(self._adapters.values()):
            try:
                await adapter.close()
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning("Error closing adapter %s: %s", type(adapter).__name__, exc)

    def _stamp(self, quote: Quote) -> Quote:
        """Keep timestamps non-decreasing per symbol."""
        last = self._last_timestamp.get(quote.symbol)
        if last is not None and quote.timestamp < last:
            quote = quote.model_copy(update={"timestamp": last})
        self._last_timestamp[quote.symbol] = quote.timestamp
        return quote

    def _record(self, requested: int, succeeded: int, failed: int) -> None:
        stats = self._stats
        stats.batches += 1
        stats.requested += requested
        stats.succeeded += succeeded
        stats.failed += failed
        stats.last_batch_requested = requested
        stats.last_batch_succeeded = succeeded
        stats.last_batch_failed = failed


def _dedupe(items: Iterable[BatchItem]) -> list[BatchItem]:
    seen: set[str] = set()
    unique: list[BatchItem] = []
    for item in items:
        if item.symbol in seen:
            continue
        seen.add(item.symbol)
        unique.append(item)
    return unique
