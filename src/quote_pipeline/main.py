"""Main module for the quote pipeline service."""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from quote_pipeline.config import get_settings
from quote_pipeline.routers import (market_data_router, markets_router,
                                    series_router)
from quote_pipeline.services.market_factory import create_market_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    """Build the pipeline at startup; stop every loop and close clients on shutdown."""
    settings = get_settings()
    fastapi_app.state.market_service = create_market_service(settings)

    yield

    try:
        await fastapi_app.state.market_service.close()
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Error closing market service: %s", exc)


app = FastAPI(
    title="Quote Pipeline",
    description="Normalized quotes for crypto, equities and indices with session-aware polling",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(market_data_router)
app.include_router(markets_router)
app.include_router(series_router)


@app.get("/")
def health():
    """Return health check status."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    """Batch success/failure counters."""
    return app.state.market_service.metrics()


def run():
    """Run the server (uvicorn). Use for `poetry run start`."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("quote_pipeline.main:app", host=settings.host, port=settings.port)
