"""API routers.

Includes routes for:
- /market-data - single and batch quotes
- /markets - trading-session status and polling intervals
- /series - chart series subscriptions, plus /series/{id}/stream over WebSocket
"""
from quote_pipeline.routers.market_data import router as market_data_router
from quote_pipeline.routers.markets import router as markets_router
from quote_pipeline.routers.series import router as series_router

__all__ = [
    "market_data_router",
    "markets_router",
    "series_router",
]
