"""Service layer: batch fetching, session gating, chart series and the public facade."""
from quote_pipeline.services.batch_orchestrator import BatchOrchestrator
from quote_pipeline.services.market_hours import (SessionCalendar,
                                                  TradingSessionGate)
from quote_pipeline.services.market_service import MarketService
from quote_pipeline.services.price_updater import PriceSeries, SeriesUpdater
from quote_pipeline.services.quote_board import QuoteBoard
from quote_pipeline.services.series_registry import (SeriesHandle,
                                                     SeriesRegistry)

__all__ = [
    "BatchOrchestrator",
    "MarketService",
    "PriceSeries",
    "QuoteBoard",
    "SeriesHandle",
    "SeriesRegistry",
    "SeriesUpdater",
    "SessionCalendar",
    "TradingSessionGate",
]
