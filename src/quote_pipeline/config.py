"""Runtime settings, read once from QUOTE_PIPELINE_* environment variables."""
import json
import os
from datetime import date
from functools import lru_cache

from pydantic import BaseModel, Field, field_validator

from quote_pipeline.schemas import InstrumentClass

ENV_PREFIX = "QUOTE_PIPELINE_"

DEFAULT_INDEX_MAP: dict[str, str] = {
    "INDEX:SPX": "^GSPC",
    "INDEX:IXIC": "^IXIC",
    "INDEX:DJI": "^DJI",
    "INDEX:IBOV": "^BVSP",
    "BMFBOVESPA:IBOVESPA": "^BVSP",
}

DEFAULT_VOLATILITY: dict[InstrumentClass, float] = {
    InstrumentClass.CRYPTO: 0.015,
    InstrumentClass.EQUITY_BR: 0.008,
    InstrumentClass.EQUITY: 0.004,
    InstrumentClass.INDEX: 0.002,
}


def _split_dates(raw: str | None) -> list[date]:
    if not raw:
        return []
    return [date.fromisoformat(part.strip()) for part in raw.split(",") if part.strip()]


class Settings(BaseModel):
    """Pipeline knobs. Defaults match the tuned production values."""

    chunk_size: int = Field(default=15, ge=1)
    inter_batch_delay: float = Field(default=0.2, ge=0)
    request_timeout: float = Field(default=5.0, gt=0)

    crypto_interval: float = Field(default=5.0, gt=0)
    open_interval: float = Field(default=10.0, gt=0)
    closed_interval: float = Field(default=300.0, gt=0)

    binance_base_url: str = "https://api.binance.com"
    yahoo_base_url: str = "https://query1.finance.yahoo.com"

    index_map: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_INDEX_MAP))
    us_holidays: list[date] = Field(default_factory=list)
    b3_holidays: list[date] = Field(default_factory=list)
    volatility: dict[InstrumentClass, float] = Field(
        default_factory=lambda: dict(DEFAULT_VOLATILITY)
    )

    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8001

    @field_validator("volatility")
    @classmethod
    def _bands_positive(cls, value: dict[InstrumentClass, float]) -> dict[InstrumentClass, float]:
        for klass, band in value.items():
            if not 0 < band < 1:
                raise ValueError(f"volatility band for {klass.value} must be in (0, 1)")
        return value

    @classmethod
    def from_env(cls) -> "Settings":
        raw: dict[str, object] = {}
        for name in (
            "chunk_size",
            "inter_batch_delay",
            "request_timeout",
            "crypto_interval",
            "open_interval",
            "closed_interval",
            "binance_base_url",
            "yahoo_base_url",
            "log_level",
            "host",
            "port",
        ):
            value = os.getenv(ENV_PREFIX + name.upper())
            if value is not None:
                raw[name] = value

        index_map = dict(DEFAULT_INDEX_MAP)
        raw_index_map = os.getenv(ENV_PREFIX + "INDEX_MAP")
        if raw_index_map:
            index_map.update(json.loads(raw_index_map))
        raw["index_map"] = index_map

        raw["us_holidays"] = _split_dates(os.getenv(ENV_PREFIX + "US_HOLIDAYS"))
        raw["b3_holidays"] = _split_dates(os.getenv(ENV_PREFIX + "B3_HOLIDAYS"))
        return cls.model_validate(raw)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
