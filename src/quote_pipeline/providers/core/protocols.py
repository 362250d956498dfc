"""Protocols for quote sources consumed by the polling loops."""
from collections.abc import Iterable, Mapping
from typing import Protocol

from quote_pipeline.schemas import BatchItem, Quote


class QuoteSource(Protocol):
    """Anything that resolves a batch of (symbol, class) items to quotes.

    The orchestrator is the production implementation; tests pass fakes.
    """

    async def fetch_batch(self, items: Iterable[BatchItem]) -> Mapping[str, Quote]:
        """Return quotes keyed by symbol; failed symbols are omitted."""
        ...
