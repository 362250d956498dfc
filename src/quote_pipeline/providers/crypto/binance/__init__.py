"""Binance spot market adapter."""
from quote_pipeline.providers.crypto.binance.binance_provider import BinanceProvider

__all__ = ["BinanceProvider"]
