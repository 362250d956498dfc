"""Equity venue adapters."""
from quote_pipeline.providers.stocks.yahoo import (YahooChartProvider,
                                                   YahooEquityProvider)

__all__ = ["YahooChartProvider", "YahooEquityProvider"]
