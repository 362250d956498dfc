"""Shared fakes for the quote pipeline tests."""
import asyncio
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from quote_pipeline.schemas import BatchItem, InstrumentClass, Quote


def make_quote(symbol: str, price: float, **overrides) -> Quote:
    """Valid quote; a non-positive price bypasses validation like a buggy upstream would."""
    fields = {
        "symbol": symbol,
        "price": price,
        "change": 0.0,
        "change_percent": 0.0,
        "volume": 1234.0,
        "high_24h": max(price, 0.0),
        "low_24h": max(price, 0.0),
        "market_cap": None,
        "timestamp": datetime(2024, 3, 6, 15, 0, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    if price <= 0:
        return Quote.model_construct(**fields)
    return Quote(**fields)


def mock_client(handler: Callable[[httpx.Request], httpx.Response], base_url: str) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=base_url)


class FakeAdapter:
    """Venue adapter stand-in: a price per symbol, None for absent, or an exception to raise."""

    supported_classes = frozenset(InstrumentClass)

    def __init__(self, prices: dict[str, object] | None = None) -> None:
        self.prices = dict(prices or {})
        self.calls: list[str] = []
        self.closed = 0

    async def fetch(self, symbol: str, instrument_class: InstrumentClass) -> Quote | None:
        self.calls.append(symbol)
        value = self.prices.get(symbol)
        if isinstance(value, BaseException):
            raise value
        if isinstance(value, Quote):
            return value
        if value is None:
            return None
        return make_quote(symbol, float(value))

    async def close(self) -> None:
        self.closed += 1


class ScriptedSource:
    """QuoteSource replaying one response per call: a price, None, or an exception."""

    def __init__(self, *responses: object) -> None:
        self.responses = list(responses)
        self.calls = 0

    async def fetch_batch(self, items: Iterable[BatchItem]) -> dict[str, Quote]:
        self.calls += 1
        items = list(items)
        response = self.responses.pop(0) if self.responses else None
        if isinstance(response, BaseException):
            raise response
        if response is None:
            return {}
        if isinstance(response, dict):
            return {k: make_quote(k, v) for k, v in response.items()}
        return {items[0].symbol: make_quote(items[0].symbol, float(response))}


class GatedSource:
    """QuoteSource that blocks each fetch until `release` is set."""

    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.calls = 0

    async def fetch_batch(self, items: Iterable[BatchItem]) -> dict[str, Quote]:
        self.calls += 1
        await self.release.wait()
        return {}


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


class StepClock:
    """Clock advancing by `step` on every read."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=10)) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now += self.step
        return current


# Wednesday 2024-03-06 11:00 New York: both US and B3 sessions are open.
WEDNESDAY_OPEN = datetime(2024, 3, 6, 16, 0, tzinfo=timezone.utc)
# Saturday 2024-03-09 noon UTC: every exchange is closed.
SATURDAY = datetime(2024, 3, 9, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()
