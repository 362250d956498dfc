"""Binance market data adapter for crypto pairs."""
import httpx

from quote_pipeline.providers.core import InvalidQuote
from quote_pipeline.providers.core.market_provider_abc import DEFAULT_TIMEOUT
from quote_pipeline.providers.core.utils import to_float
from quote_pipeline.providers.crypto.binance.models import (
    BinanceTicker24h, BinanceTickerParams)
from quote_pipeline.providers.crypto.crypto_provider_abc import \
    CryptoProviderABC
from quote_pipeline.schemas import InstrumentClass, Quote, utcnow


class BinanceProvider(CryptoProviderABC):
    """Crypto quotes from the Binance public 24h ticker.

    Canonical symbols look like "BINANCE:BTCUSDT"; the venue prefix and any
    separator are dropped before querying. No API key required. Every request
    goes out with caching disabled since this is the live price source.
    """

    api_name = "Binance"
    BASE_URL = "https://api.binance.com"
    TICKER_PATH = "/api/v3/ticker/24hr"

    def __init__(
        self,
        base_url: str = BASE_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, client=client)

    async def _fetch_quote(self, symbol: str, instrument_class: InstrumentClass) -> Quote:
        pair = self.resolve_symbol(symbol, instrument_class)
        params = BinanceTickerParams(symbol=pair).model_dump()
        data = await self._get_json(self.TICKER_PATH, params=params)
        return self._quote_from_ticker(symbol, BinanceTicker24h.model_validate(data))

    def _quote_from_ticker(self, symbol: str, ticker: BinanceTicker24h) -> Quote:
        """Build a Quote from a 24h ticker payload."""
        price = to_float(ticker.lastPrice)
        if price is None or price <= 0:
            raise InvalidQuote(f"No last price for '{symbol}'", symbol=symbol)

        open_price = to_float(ticker.openPrice) or price
        change = price - open_price
        computed_pct = (change / open_price) * 100 if open_price > 0 else 0.0
        upstream_pct = to_float(ticker.priceChangePercent)
        change_percent = upstream_pct if upstream_pct else computed_pct

        return Quote(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            volume=max(to_float(ticker.volume) or 0.0, 0.0),
            high_24h=to_float(ticker.highPrice) or price,
            low_24h=to_float(ticker.lowPrice) or price,
            # The ticker has no market cap; quote volume is the closest size figure.
            market_cap=to_float(ticker.quoteVolume),
            timestamp=utcnow(),
        )
