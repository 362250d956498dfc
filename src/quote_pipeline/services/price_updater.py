"""Incremental chart updater: a fixed-size rolling price series per chart.

Each SeriesUpdater bootstraps its series once, then on every tick evicts the
oldest point and appends either the real price or, when no quote arrives, a
bounded random-walk continuation of the last price. The tick outcome is
tagged (RealTick / SyntheticTick) so callers can tell real data from a guess.
"""
import asyncio
import logging
import random
from collections import deque
from collections.abc import AsyncIterator, Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta

from quote_pipeline.config import DEFAULT_VOLATILITY
from quote_pipeline.providers.core import QuoteSource
from quote_pipeline.providers.core.utils import strip_venue_prefix
from quote_pipeline.schemas import (BatchItem, InstrumentClass, PricePoint,
                                    Quote, RealTick, SeriesSnapshot,
                                    SyntheticTick, TickOutcome, utcnow)
from quote_pipeline.services.market_hours import TradingSessionGate

logger = logging.getLogger(__name__)

# Steady-state synthetic steps use a fraction of the band; bootstrap uses all of it.
STEADY_NOISE_FRACTION = 0.4
SYNTHETIC_VOLUME_CEILING = 1_000_000.0


@dataclass(frozen=True)
class ChartWindow:
    spacing: timedelta
    capacity: int


CHART_INTERVALS: dict[str, ChartWindow] = {
    "1": ChartWindow(timedelta(minutes=1), 51),
    "5": ChartWindow(timedelta(minutes=5), 51),
    "15": ChartWindow(timedelta(minutes=15), 51),
    "60": ChartWindow(timedelta(hours=1), 25),
    "240": ChartWindow(timedelta(hours=4), 13),
    "1D": ChartWindow(timedelta(days=1), 25),
}
# Anchors for charts that start without any real quote. First match wins.
# Instrument tokens match the ticker without its venue prefix.
REFERENCE_PRICES: tuple[tuple[tuple[str, ...], float], ...] = (
    (("BTC",), 42850.0),
    (("ETH",), 2650.0),
    (("BNB",), 315.0),
    (("SOL",), 98.5),
    (("ADA",), 0.52),
    (("XRP",), 0.62),
    (("AAPL",), 195.50),
    (("MSFT",), 378.90),
    (("GOOGL",), 142.30),
    (("AMZN",), 152.40),
    (("TSLA",), 248.60),
    (("META",), 485.20),
    (("NVDA",), 875.40),
    (("VALE",), 70.25),
    (("PETR",), 34.50),
    (("ITUB",), 28.90),
    (("BBDC",), 14.85),
    (("ABEV",), 12.40),
)
# Index tokens only apply to the INDEX class.
INDEX_REFERENCE_PRICES: tuple[tuple[tuple[str, ...], float], ...] = (
    (("SPX", "GSPC", "S&P"), 4850.0),
    (("IXIC", "NASDAQ"), 15280.0),
    (("DJI", "DOW"), 38250.0),
    (("IBOV", "BVSP"), 128450.0),
)
DEFAULT_REFERENCE_PRICE = 100.0


def reference_price(symbol: str, instrument_class: InstrumentClass = InstrumentClass.EQUITY) -> float:
    if instrument_class is InstrumentClass.INDEX:
        table, key = INDEX_REFERENCE_PRICES, symbol.upper()
    else:
        table, key = REFERENCE_PRICES, strip_venue_prefix(symbol)
    for tokens, price in table:
        if any(token in key for token in tokens):
            return price
    return DEFAULT_REFERENCE_PRICE


def random_walk(start: float, count: int, band: float, rng: random.Random) -> list[float]:
    """`count` prices beginning at `start`, each step within +/- band of the previous."""
    prices = [start]
    for _ in range(count - 1):
        prices.append(prices[-1] * (1 + rng.uniform(-band, band)))
    return prices


class PriceSeries:
    """Fixed-capacity ordered buffer of price points.

    Once seeded its length never changes: every push evicts the oldest point.
    Point times never decrease.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 2:
            raise ValueError("capacity must be >= 2")
        self.capacity = capacity
        self._points: deque[PricePoint] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._points)

    @property
    def points(self) -> list[PricePoint]:
        return list(self._points)

    @property
    def first(self) -> PricePoint:
        return self._points[0]

    @property
    def last(self) -> PricePoint:
        return self._points[-1]

    def seed(self, points: Iterable[PricePoint]) -> None:
        seeded = list(points)
        if len(seeded) != self.capacity:
            raise ValueError(f"expected {self.capacity} points, got {len(seeded)}")
        self._points.clear()
        for point in seeded:
            self._append(point)

    def push(self, point: PricePoint) -> None:
        if len(self._points) < self.capacity:
            raise RuntimeError("series must be seeded before pushing")
        self._append(point)

    def _append(self, point: PricePoint) -> None:
        if self._points and point.time < self._points[-1].time:
            point = point.model_copy(update={"time": self._points[-1].time})
        self._points.append(point)


class SeriesUpdater:
    """Owns one chart's series and keeps it moving.

    States: "bootstrapping" until `bootstrap()` completes, then "steady".
    Only one update runs at a time; a tick that arrives while another is in
    flight is dropped.
    """

    def __init__(
        self,
        symbol: str,
        instrument_class: InstrumentClass,
        source: QuoteSource,
        gate: TradingSessionGate,
        *,
        interval: str = "15",
        volatility: Mapping[InstrumentClass, float] | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        window = CHART_INTERVALS.get(interval)
        if window is None:
            raise ValueError(
                f"Unknown chart interval '{interval}'. Available: {', '.join(CHART_INTERVALS)}"
            )
        self.symbol = symbol
        self.instrument_class = instrument_class
        self.interval = interval
        self.window = window
        self.series = PriceSeries(window.capacity)
        self.state = "bootstrapping"
        self.band = (volatility or DEFAULT_VOLATILITY)[instrument_class]
        self._source = source
        self._gate = gate
        self._rng = rng or random.Random()
        self._clock = clock
        self._in_flight = False
        self._last_source: str | None = None
        self._version = 0
        self._closed = False
        self._condition = asyncio.Condition()

    @property
    def last_source(self) -> str | None:
        return self._last_source

    async def bootstrap(self) -> TickOutcome:
        """Seed the series once, from a real quote when one is available."""
        quote = await self._fetch()
        capacity = self.window.capacity
        if quote is not None:
            walk = random_walk(1.0, capacity, self.band, self._rng)
            scale = quote.price / walk[-1]
            prices = [p * scale for p in walk]
            outcome: TickOutcome = RealTick(quote)
        else:
            prices = random_walk(
                reference_price(self.symbol, self.instrument_class), capacity, self.band, self._rng)
            outcome = SyntheticTick(price=prices[-1], volume=self._synthetic_volume())
            logger.info("No quote for %s at bootstrap; seeding from reference price", self.symbol)

        now = self._clock()
        points = [
            PricePoint(
                time=now - self.window.spacing * (capacity - 1 - i),
                price=price,
                volume=self._synthetic_volume(),
            )
            for i, price in enumerate(prices)
        ]
        points[-1] = PricePoint(time=now, price=outcome.price, volume=outcome.volume)
        self.series.seed(points)
        self.state = "steady"
        self._last_source = outcome.kind
        await self._notify()
        return outcome

    async def tick(self) -> TickOutcome | None:
        """Apply one update; None when dropped because another is in flight."""
        if self._in_flight:
            logger.debug("Dropping tick for %s: previous update still running", self.symbol)
            return None
        if self.state != "steady":
            raise RuntimeError("bootstrap() must complete before tick()")
        self._in_flight = True
        try:
            quote = await self._fetch()
            if quote is not None:
                outcome: TickOutcome = RealTick(quote)
            else:
                outcome = SyntheticTick(
                    price=self._synthetic_step(self.series.last.price),
                    volume=self._synthetic_volume(),
                )
            self.series.push(
                PricePoint(time=self._clock(), price=outcome.price, volume=outcome.volume)
            )
            self._last_source = outcome.kind
        finally:
            self._in_flight = False
        await self._notify()
        return outcome

    async def run(self, stop_event: asyncio.Event) -> None:
        """Tick on the gate's interval until `stop_event` is set or the task is cancelled."""
        if self.state == "bootstrapping":
            await self.bootstrap()
        while not stop_event.is_set():
            delay = self._gate.update_interval(self.instrument_class, self.symbol)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=delay.total_seconds())
                break
            except asyncio.TimeoutError:
                pass
            try:
                await self.tick()
            except Exception as exc:  # pylint: disable=broad-except
                logger.exception("Series update failed for %s: %s", self.symbol, exc)

    def snapshot(self, handle_id: str | None = None) -> SeriesSnapshot:
        points = self.series.points
        if points:
            first, current = points[0].price, points[-1].price
        else:
            first = current = 0.0
        change = current - first
        return SeriesSnapshot(
            handle_id=handle_id,
            symbol=self.symbol,
            instrument_class=self.instrument_class,
            interval=self.interval,
            state=self.state,
            points=points,
            current_price=current,
            change=change,
            change_percent=(change / first) * 100 if first > 0 else 0.0,
            last_source=self._last_source,
        )

    async def updates(self, handle_id: str | None = None) -> AsyncIterator[SeriesSnapshot]:
        """Yield a snapshot after every applied update until closed."""
        seen = self._version
        while not self._closed:
            async with self._condition:
                await self._condition.wait_for(lambda: self._version != seen or self._closed)
            if self._closed:
                return
            seen = self._version
            yield self.snapshot(handle_id)

    async def close(self) -> None:
        """Release anyone waiting in `updates`."""
        self._closed = True
        async with self._condition:
            self._condition.notify_all()

    async def _fetch(self) -> Quote | None:
        item = BatchItem(symbol=self.symbol, instrument_class=self.instrument_class)
        try:
            quotes = await self._source.fetch_batch([item])
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Quote source failed for %s: %s", self.symbol, exc)
            return None
        quote = quotes.get(self.symbol)
        if quote is None or quote.price <= 0:
            return None
        return quote

    def _synthetic_step(self, last_price: float) -> float:
        limit = self.band * STEADY_NOISE_FRACTION
        return last_price * (1 + self._rng.uniform(-limit, limit))

    def _synthetic_volume(self) -> float:
        return self._rng.uniform(0, SYNTHETIC_VOLUME_CEILING)

    async def _notify(self) -> None:
        async with self._condition:
            self._version += 1
            self._condition.notify_all()
