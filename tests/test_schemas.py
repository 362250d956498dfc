import asyncio

import httpx
import pytest
from pydantic import ValidationError

from quote_pipeline.providers.core import (MalformedResponse,
                                           ProviderErrorMapper,
                                           TransportError, UnmappedSymbol,
                                           UpstreamRejection, VenueError)
from quote_pipeline.schemas import BatchItem, InstrumentClass, Quote
from quote_pipeline.services.utils import parse_symbols_param


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("crypto", InstrumentClass.CRYPTO),
        ("Ação BR", InstrumentClass.EQUITY_BR),
        ("equity_br", InstrumentClass.EQUITY_BR),
        ("Índice", InstrumentClass.INDEX),
        ("stock", InstrumentClass.EQUITY),
        ("something else", InstrumentClass.EQUITY),
    ],
)
def test_instrument_class_parse(label, expected) -> None:
    assert InstrumentClass.parse(label) is expected


def test_instrument_class_infer_from_venue() -> None:
    assert InstrumentClass.infer("BINANCE:BTCUSDT") is InstrumentClass.CRYPTO
    assert InstrumentClass.infer("INDEX:SPX") is InstrumentClass.INDEX
    assert InstrumentClass.infer("BMFBOVESPA:VALE3") is InstrumentClass.EQUITY_BR
    assert InstrumentClass.infer("NASDAQ:AAPL") is InstrumentClass.EQUITY


def test_batch_item_accepts_type_alias() -> None:
    item = BatchItem.model_validate({"symbol": "BINANCE:BTCUSDT", "type": "crypto"})
    assert item.instrument_class is InstrumentClass.CRYPTO
    assert BatchItem.of("VALE3", "Ação BR").instrument_class is InstrumentClass.EQUITY_BR


def test_batch_item_parses_dashboard_labels() -> None:
    assert BatchItem.model_validate({"symbol": "INDEX:SPX", "type": "Índice"}).instrument_class is InstrumentClass.INDEX
    assert BatchItem.model_validate({"symbol": "VALE3", "type": "Ação BR"}).instrument_class is InstrumentClass.EQUITY_BR
    assert BatchItem.model_validate({"symbol": "X", "type": InstrumentClass.CRYPTO}).instrument_class is InstrumentClass.CRYPTO


def test_quote_rejects_non_positive_price() -> None:
    with pytest.raises(ValidationError):
        Quote(symbol="X", price=0, high_24h=0, low_24h=0)


def test_parse_symbols_param() -> None:
    items = parse_symbols_param({"symbols": "BINANCE:BTCUSDT|crypto, NASDAQ:AAPL ,INDEX:SPX|"})
    assert [(i.symbol, i.instrument_class) for i in items] == [
        ("BINANCE:BTCUSDT", InstrumentClass.CRYPTO),
        ("NASDAQ:AAPL", InstrumentClass.EQUITY),
        ("INDEX:SPX", InstrumentClass.INDEX),
    ]
    assert parse_symbols_param({}) == []


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://example.test/")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError("bad status", request=request, response=response)


def test_error_mapper_classifies_failures() -> None:
    mapper = ProviderErrorMapper(api_name="Binance")

    rejection = mapper.classify(_status_error(429), symbol="BINANCE:BTCUSDT")
    assert isinstance(rejection, UpstreamRejection)
    assert rejection.rate_limited
    assert rejection.venue == "Binance"
    assert not mapper.classify(_status_error(503)).rate_limited

    assert isinstance(mapper.classify(httpx.ReadTimeout("slow")), TransportError)
    assert isinstance(mapper.classify(asyncio.TimeoutError()), TransportError)
    assert isinstance(mapper.classify(httpx.ConnectError("down")), TransportError)
    assert isinstance(mapper.classify(KeyError("lastPrice")), MalformedResponse)

    other = mapper.classify(RuntimeError("???"), symbol="X")
    assert type(other) is VenueError
    assert isinstance(other.__cause__, RuntimeError)


def test_error_mapper_keeps_venue_errors() -> None:
    original = UnmappedSymbol("not mapped", symbol="INDEX:ZZZ")
    classified = ProviderErrorMapper(api_name="Yahoo Finance").classify(original)
    assert classified is original
    assert classified.venue == "Yahoo Finance"
    assert classified.reason == "unmapped symbol"
