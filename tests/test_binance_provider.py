import logging

import httpx
import pytest

from conftest import mock_client
from quote_pipeline.providers import BinanceProvider
from quote_pipeline.schemas import InstrumentClass

BASE_URL = "https://api.binance.com"


def ticker(**overrides: str) -> dict:
    payload = {
        "symbol": "BTCUSDT",
        "lastPrice": "43000.00",
        "openPrice": "42000.00",
        "priceChangePercent": "2.381",
        "highPrice": "43500.00",
        "lowPrice": "41800.00",
        "volume": "1234.5",
        "quoteVolume": "53000000.0",
    }
    payload.update(overrides)
    return payload


def provider_for(handler) -> BinanceProvider:
    return BinanceProvider(client=mock_client(handler, BASE_URL))


def test_resolve_symbol_strips_venue_and_separators() -> None:
    provider = provider_for(lambda request: httpx.Response(200, json=ticker()))
    assert provider.resolve_symbol("BINANCE:BTCUSDT", InstrumentClass.CRYPTO) == "BTCUSDT"
    assert provider.resolve_symbol("binance:eth/usdt", InstrumentClass.CRYPTO) == "ETHUSDT"
    assert provider.resolve_symbol("SOL-USDT", InstrumentClass.CRYPTO) == "SOLUSDT"


@pytest.mark.asyncio
async def test_fetch_normalizes_ticker() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=ticker())

    provider = provider_for(handler)
    quote = await provider.fetch("BINANCE:BTCUSDT", InstrumentClass.CRYPTO)

    assert quote is not None
    assert quote.symbol == "BINANCE:BTCUSDT"
    assert quote.price == 43000.0
    assert quote.change == pytest.approx(1000.0)
    assert quote.change_percent == pytest.approx(2.381)
    assert quote.high_24h == 43500.0
    assert quote.low_24h == 41800.0
    assert quote.volume == 1234.5
    assert quote.market_cap == 53000000.0

    request = seen[0]
    assert request.url.path == "/api/v3/ticker/24hr"
    assert request.url.params["symbol"] == "BTCUSDT"
    assert "no-cache" in request.headers["Cache-Control"]
    assert request.headers["Pragma"] == "no-cache"


@pytest.mark.asyncio
async def test_change_percent_computed_when_upstream_reports_zero() -> None:
    provider = provider_for(
        lambda request: httpx.Response(
            200, json=ticker(lastPrice="42000", openPrice="40000", priceChangePercent="0")
        )
    )
    quote = await provider.fetch("BINANCE:BTCUSDT", InstrumentClass.CRYPTO)

    assert quote is not None
    assert quote.change == pytest.approx(2000.0)
    assert quote.change_percent == pytest.approx(5.0)


@pytest.mark.asyncio
async def test_missing_high_low_fall_back_to_price() -> None:
    payload = ticker()
    del payload["highPrice"]
    del payload["lowPrice"]
    provider = provider_for(lambda request: httpx.Response(200, json=payload))

    quote = await provider.fetch("BINANCE:BTCUSDT", InstrumentClass.CRYPTO)

    assert quote is not None
    assert quote.high_24h == quote.low_24h == 43000.0


@pytest.mark.asyncio
async def test_rate_limit_is_absent_and_logged(caplog) -> None:
    provider = provider_for(lambda request: httpx.Response(429, json={"code": -1003}))

    with caplog.at_level(logging.WARNING):
        quote = await provider.fetch("BINANCE:BTCUSDT", InstrumentClass.CRYPTO)

    assert quote is None
    assert any("rate limited" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_zero_price_is_absent() -> None:
    provider = provider_for(lambda request: httpx.Response(200, json=ticker(lastPrice="0.00")))
    assert await provider.fetch("BINANCE:BTCUSDT", InstrumentClass.CRYPTO) is None


@pytest.mark.asyncio
async def test_transport_failure_is_absent() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = provider_for(handler)
    assert await provider.fetch("BINANCE:BTCUSDT", InstrumentClass.CRYPTO) is None


@pytest.mark.asyncio
async def test_malformed_body_is_absent() -> None:
    provider = provider_for(lambda request: httpx.Response(200, json=[1, 2, 3]))
    assert await provider.fetch("BINANCE:BTCUSDT", InstrumentClass.CRYPTO) is None


@pytest.mark.asyncio
async def test_injected_client_is_not_closed_by_adapter() -> None:
    client = mock_client(lambda request: httpx.Response(200, json=ticker()), BASE_URL)
    async with BinanceProvider(client=client):
        pass
    assert not client.is_closed
    await client.aclose()
