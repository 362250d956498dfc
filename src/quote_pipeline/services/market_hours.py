"""Trading-session gate: market open/closed state and polling intervals.

Session rules live in SessionCalendar tables so venue calendars can change
without touching callers. Crypto bypasses calendars and is always open.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from quote_pipeline.schemas import (BatchItem, InstrumentClass, MarketStatus,
                                    utcnow)

US = "US"
B3 = "B3"

# Fixed-date closures as (month, day). Movable feasts come from configuration.
US_FIXED_HOLIDAYS = frozenset({(1, 1), (6, 19), (7, 4), (12, 25)})
B3_FIXED_HOLIDAYS = frozenset(
    {(1, 1), (4, 21), (5, 1), (9, 7), (10, 12), (11, 2), (11, 15), (11, 20), (12, 24), (12, 25), (12, 31)}
)

_MAX_LOOKAHEAD_DAYS = 366


@dataclass(frozen=True)
class SessionCalendar:
    """Weekday session window for one exchange, in exchange-local time."""

    name: str
    tz: ZoneInfo
    open_time: time
    close_time: time
    fixed_holidays: frozenset[tuple[int, int]] = frozenset()
    extra_holidays: frozenset[date] = field(default_factory=frozenset)

    def localize(self, now: datetime) -> datetime:
        """Express `now` in exchange time; naive datetimes are taken as local."""
        if now.tzinfo is None:
            return now.replace(tzinfo=self.tz)
        return now.astimezone(self.tz)

    def is_trading_day(self, day: date) -> bool:
        if day.weekday() >= 5:
            return False
        if (day.month, day.day) in self.fixed_holidays:
            return False
        return day not in self.extra_holidays

    def is_open(self, now: datetime) -> bool:
        local = self.localize(now)
        return (
            self.is_trading_day(local.date())
            and self.open_time <= local.time() < self.close_time
        )

    def next_open(self, now: datetime) -> datetime:
        """Start of the next session strictly after `now` (or later today)."""
        local = self.localize(now)
        today = local.date()
        if self.is_trading_day(today) and local.time() < self.open_time:
            return datetime.combine(today, self.open_time, tzinfo=self.tz)
        for offset in range(1, _MAX_LOOKAHEAD_DAYS + 1):
            day = today + timedelta(days=offset)
            if self.is_trading_day(day):
                return datetime.combine(day, self.open_time, tzinfo=self.tz)
        raise ValueError(f"{self.name} calendar has no trading day within a year")

    def next_close(self, now: datetime) -> datetime:
        local = self.localize(now)
        return datetime.combine(local.date(), self.close_time, tzinfo=self.tz)

    def status(self, now: datetime) -> MarketStatus:
        if self.is_open(now):
            return MarketStatus(
                is_open=True,
                message=f"{self.name} market open",
                next_close=self.next_close(now),
            )
        opens = self.next_open(now)
        return MarketStatus(
            is_open=False,
            message=f"{self.name} market closed. Opens {opens:%A %H:%M} ({self.tz.key})",
            next_open=opens,
        )


def default_calendars(
    us_holidays: Iterable[date] = (),
    b3_holidays: Iterable[date] = (),
) -> dict[str, SessionCalendar]:
    """NYSE/NASDAQ and B3 regular sessions."""
    return {
        US: SessionCalendar(
            name=US,
            tz=ZoneInfo("America/New_York"),
            open_time=time(9, 30),
            close_time=time(16, 0),
            fixed_holidays=US_FIXED_HOLIDAYS,
            extra_holidays=frozenset(us_holidays),
        ),
        B3: SessionCalendar(
            name=B3,
            tz=ZoneInfo("America/Sao_Paulo"),
            open_time=time(10, 0),
            close_time=time(17, 0),
            fixed_holidays=B3_FIXED_HOLIDAYS,
            extra_holidays=frozenset(b3_holidays),
        ),
    }


class TradingSessionGate:
    """Decides whether an instrument's market is open and how often to poll it."""

    CRYPTO_MESSAGE = "Market open 24/7"

    def __init__(
        self,
        calendars: Mapping[str, SessionCalendar] | None = None,
        *,
        crypto_interval: float = 5.0,
        open_interval: float = 10.0,
        closed_interval: float = 300.0,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._calendars = dict(calendars) if calendars is not None else default_calendars()
        self.crypto_interval = timedelta(seconds=crypto_interval)
        self.open_interval = timedelta(seconds=open_interval)
        self.closed_interval = timedelta(seconds=closed_interval)
        self._clock = clock

    def calendar_for(self, instrument_class: InstrumentClass, symbol: str = "") -> SessionCalendar | None:
        """Exchange calendar governing the instrument; None for crypto."""
        if instrument_class is InstrumentClass.CRYPTO:
            return None
        if instrument_class is InstrumentClass.EQUITY_BR:
            return self._calendars[B3]
        if instrument_class is InstrumentClass.EQUITY:
            return self._calendars[US]
        upper = symbol.upper()
        if "IBOV" in upper or "BVSP" in upper:
            return self._calendars[B3]
        if any(code in upper for code in ("SPX", "GSPC", "IXIC", "DJI")):
            return self._calendars[US]
        return self._calendars[B3]

    def is_open(
        self, instrument_class: InstrumentClass, symbol: str = "", now: datetime | None = None
    ) -> MarketStatus:
        calendar = self.calendar_for(instrument_class, symbol)
        if calendar is None:
            return MarketStatus(is_open=True, message=self.CRYPTO_MESSAGE)
        return calendar.status(now or self._clock())

    def update_interval(
        self, instrument_class: InstrumentClass, symbol: str = "", now: datetime | None = None
    ) -> timedelta:
        if instrument_class is InstrumentClass.CRYPTO:
            return self.crypto_interval
        if self.is_open(instrument_class, symbol, now).is_open:
            return self.open_interval
        return self.closed_interval

    def effective_interval(self, items: Iterable[BatchItem], now: datetime | None = None) -> timedelta:
        """Shortest interval across a watch-list, so its fastest leg stays live."""
        when = now or self._clock()
        intervals = [self.update_interval(i.instrument_class, i.symbol, when) for i in items]
        return min(intervals, default=self.closed_interval)

    def should_refresh(
        self, instrument_class: InstrumentClass, symbol: str = "", now: datetime | None = None
    ) -> bool:
        if instrument_class is InstrumentClass.CRYPTO:
            return True
        return self.is_open(instrument_class, symbol, now).is_open
