"""Cryptocurrency venue adapters."""
from quote_pipeline.providers.crypto.binance import BinanceProvider
from quote_pipeline.providers.crypto.crypto_provider_abc import CryptoProviderABC

__all__ = ["BinanceProvider", "CryptoProviderABC"]
