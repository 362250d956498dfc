from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from conftest import SATURDAY, WEDNESDAY_OPEN
from quote_pipeline.schemas import BatchItem, InstrumentClass
from quote_pipeline.services import TradingSessionGate
from quote_pipeline.services.market_hours import B3, US, default_calendars

NY = ZoneInfo("America/New_York")
SP = ZoneInfo("America/Sao_Paulo")

CRYPTO = InstrumentClass.CRYPTO
EQUITY = InstrumentClass.EQUITY
EQUITY_BR = InstrumentClass.EQUITY_BR
INDEX = InstrumentClass.INDEX


@pytest.fixture
def gate() -> TradingSessionGate:
    return TradingSessionGate(default_calendars())


def test_crypto_always_open(gate) -> None:
    status = gate.is_open(CRYPTO, "BINANCE:BTCUSDT", SATURDAY)
    assert status.is_open
    assert status.message == "Market open 24/7"
    assert gate.update_interval(CRYPTO, now=SATURDAY) == timedelta(seconds=5)


def test_us_session_window(gate) -> None:
    open_status = gate.is_open(EQUITY, "NASDAQ:AAPL", datetime(2024, 3, 6, 11, 0, tzinfo=NY))
    assert open_status.is_open
    assert open_status.message == "US market open"
    assert open_status.next_close == datetime(2024, 3, 6, 16, 0, tzinfo=NY)

    assert gate.is_open(EQUITY, now=datetime(2024, 3, 6, 9, 30, tzinfo=NY)).is_open
    assert not gate.is_open(EQUITY, now=datetime(2024, 3, 6, 9, 29, tzinfo=NY)).is_open
    assert not gate.is_open(EQUITY, now=datetime(2024, 3, 6, 16, 0, tzinfo=NY)).is_open


def test_b3_session_window(gate) -> None:
    assert gate.is_open(EQUITY_BR, "VALE3", datetime(2024, 3, 6, 10, 30, tzinfo=SP)).is_open
    assert not gate.is_open(EQUITY_BR, "VALE3", datetime(2024, 3, 6, 9, 59, tzinfo=SP)).is_open
    assert not gate.is_open(EQUITY_BR, "VALE3", datetime(2024, 3, 6, 17, 0, tzinfo=SP)).is_open


def test_weekend_closed_with_next_open_on_monday(gate) -> None:
    status = gate.is_open(EQUITY, "NASDAQ:AAPL", datetime(2024, 3, 9, 12, 0, tzinfo=NY))

    assert not status.is_open
    assert status.next_open == datetime(2024, 3, 11, 9, 30, tzinfo=NY)
    assert status.message == "US market closed. Opens Monday 09:30 (America/New_York)"


def test_next_open_is_later_today_before_the_bell(gate) -> None:
    status = gate.is_open(EQUITY_BR, "VALE3", datetime(2024, 3, 6, 8, 0, tzinfo=SP))
    assert status.next_open == datetime(2024, 3, 6, 10, 0, tzinfo=SP)


def test_fixed_holiday_closes_session(gate) -> None:
    status = gate.is_open(EQUITY, "NYSE:KO", datetime(2024, 7, 4, 11, 0, tzinfo=NY))
    assert not status.is_open
    assert status.next_open == datetime(2024, 7, 5, 9, 30, tzinfo=NY)

    assert not gate.is_open(EQUITY_BR, "VALE3", datetime(2024, 11, 15, 11, 0, tzinfo=SP)).is_open


def test_configured_holiday_closes_session() -> None:
    gate = TradingSessionGate(default_calendars(us_holidays=[date(2024, 3, 29)]))
    assert not gate.is_open(EQUITY, "NYSE:KO", datetime(2024, 3, 29, 11, 0, tzinfo=NY)).is_open
    assert gate.is_open(EQUITY_BR, "VALE3", datetime(2024, 3, 29, 11, 0, tzinfo=SP)).is_open


def test_naive_time_is_exchange_local(gate) -> None:
    assert gate.is_open(EQUITY, now=datetime(2024, 3, 6, 11, 0)).is_open
    assert gate.is_open(EQUITY_BR, now=datetime(2024, 3, 6, 16, 30)).is_open
    assert not gate.is_open(EQUITY, now=datetime(2024, 3, 6, 17, 0)).is_open


def test_status_is_idempotent(gate) -> None:
    when = datetime(2024, 3, 6, 11, 0, tzinfo=NY)
    assert gate.is_open(EQUITY, now=when) == gate.is_open(EQUITY, now=when)


def test_index_routing() -> None:
    calendars = default_calendars()
    gate = TradingSessionGate(calendars)
    assert gate.calendar_for(INDEX, "INDEX:SPX") is calendars[US]
    assert gate.calendar_for(INDEX, "INDEX:DJI") is calendars[US]
    assert gate.calendar_for(INDEX, "^IXIC") is calendars[US]
    assert gate.calendar_for(INDEX, "INDEX:IBOV") is calendars[B3]
    assert gate.calendar_for(INDEX, "BMFBOVESPA:IBOVESPA") is calendars[B3]
    assert gate.calendar_for(INDEX, "INDEX:OTHER") is calendars[B3]
    assert gate.calendar_for(CRYPTO, "BINANCE:BTCUSDT") is None


def test_update_intervals(gate) -> None:
    assert gate.update_interval(EQUITY, now=WEDNESDAY_OPEN) == timedelta(seconds=10)
    assert gate.update_interval(EQUITY, now=SATURDAY) == timedelta(seconds=300)
    assert gate.should_refresh(CRYPTO, now=SATURDAY)
    assert gate.should_refresh(EQUITY, now=WEDNESDAY_OPEN)
    assert not gate.should_refresh(EQUITY, now=SATURDAY)


def test_mixed_watch_list_uses_crypto_interval_while_equities_closed(gate) -> None:
    items = [BatchItem.of("BINANCE:BTCUSDT", CRYPTO), BatchItem.of("NASDAQ:AAPL", EQUITY)]
    assert gate.effective_interval(items, SATURDAY) == timedelta(seconds=5)


def test_effective_interval_of_empty_list_is_closed_interval(gate) -> None:
    assert gate.effective_interval([], SATURDAY) == timedelta(seconds=300)


def test_injected_clock_is_used_when_now_omitted() -> None:
    gate = TradingSessionGate(default_calendars(), clock=lambda: SATURDAY)
    assert not gate.is_open(EQUITY, "NASDAQ:AAPL").is_open

    gate = TradingSessionGate(default_calendars(), clock=lambda: WEDNESDAY_OPEN)
    assert gate.is_open(EQUITY, "NASDAQ:AAPL").is_open
