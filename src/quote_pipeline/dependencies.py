"""FastAPI dependency injection: app.state holds singletons; Depends() resolves them.

The lifespan in main.py builds one MarketService at startup and attaches it
to app.state; routes resolve it through these getters.
"""
from typing import Annotated

from fastapi import Depends, Request, WebSocket

from quote_pipeline.services import MarketService


def get_market_service(request: Request) -> MarketService:
    """Resolve the MarketService from app.state (created at startup)."""
    return request.app.state.market_service


def get_market_service_ws(websocket: WebSocket) -> MarketService:
    """Resolve the MarketService for WebSocket routes."""
    return websocket.scope["app"].state.market_service


MarketServiceDep = Annotated[MarketService, Depends(get_market_service)]
MarketServiceWs = Annotated[MarketService, Depends(get_market_service_ws)]
