"""Venue adapters for crypto pairs, equities and indices.

- BinanceProvider: crypto pairs via the Binance 24h ticker
- YahooEquityProvider: international and B3 equities via the Yahoo chart API
- YahooIndexProvider: indices via the Yahoo chart API and an explicit code map

All adapters implement VenueAdapterABC and return a normalized Quote, or None
when no valid quote could be obtained.

Example:
    async with BinanceProvider() as provider:
        quote = await provider.fetch("BINANCE:BTCUSDT", InstrumentClass.CRYPTO)
        if quote is not None:
            print(f"{quote.symbol}: {quote.price}")
"""
from quote_pipeline.providers.core import VenueAdapterABC
from quote_pipeline.providers.crypto import BinanceProvider
from quote_pipeline.providers.indices import YahooIndexProvider
from quote_pipeline.providers.stocks import YahooEquityProvider

__all__ = [
    "BinanceProvider",
    "VenueAdapterABC",
    "YahooEquityProvider",
    "YahooIndexProvider",
]
