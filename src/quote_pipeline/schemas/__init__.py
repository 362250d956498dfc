"""Pydantic schemas for runtime and API use. Nothing here is persisted."""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class InstrumentClass(str, Enum):
    """Instrument category; drives adapter choice, symbol rules and session rules."""

    CRYPTO = "crypto"
    EQUITY = "equity"
    EQUITY_BR = "equity_br"
    INDEX = "index"

    @classmethod
    def parse(cls, raw: "str | InstrumentClass") -> "InstrumentClass":
        """Parse an enum value or one of the labels the dashboard sends.

        Unrecognized labels fall back to EQUITY.
        """
        if isinstance(raw, InstrumentClass):
            return raw
        key = raw.strip().lower()
        return _CLASS_LABELS.get(key, cls.EQUITY)

    @classmethod
    def infer(cls, symbol: str) -> "InstrumentClass":
        """Derive a class from a venue prefix. Boundary use only."""
        venue, _, _ = symbol.upper().partition(":")
        return _VENUE_CLASSES.get(venue, cls.EQUITY)


_CLASS_LABELS: dict[str, InstrumentClass] = {
    "crypto": InstrumentClass.CRYPTO,
    "equity": InstrumentClass.EQUITY,
    "stock": InstrumentClass.EQUITY,
    "ação": InstrumentClass.EQUITY,
    "acao": InstrumentClass.EQUITY,
    "equity_br": InstrumentClass.EQUITY_BR,
    "ação br": InstrumentClass.EQUITY_BR,
    "acao br": InstrumentClass.EQUITY_BR,
    "index": InstrumentClass.INDEX,
    "índice": InstrumentClass.INDEX,
    "indice": InstrumentClass.INDEX,
}

_VENUE_CLASSES: dict[str, InstrumentClass] = {
    "BINANCE": InstrumentClass.CRYPTO,
    "INDEX": InstrumentClass.INDEX,
    "BMFBOVESPA": InstrumentClass.EQUITY_BR,
    "B3": InstrumentClass.EQUITY_BR,
}


class Quote(BaseModel):
    """Normalized point-in-time observation for one instrument."""

    symbol: str
    price: float = Field(gt=0)
    change: float = 0.0
    change_percent: float = 0.0
    volume: float = Field(default=0.0, ge=0)
    high_24h: float
    low_24h: float
    market_cap: float | None = None
    timestamp: datetime = Field(default_factory=utcnow)


class BatchItem(BaseModel):
    """One (symbol, class) request in a batch. JSON uses `type` for the class."""

    model_config = ConfigDict(populate_by_name=True)

    symbol: str
    instrument_class: InstrumentClass = Field(alias="type")

    @field_validator("instrument_class", mode="before")
    @classmethod
    def _parse_label(cls, value: object) -> object:
        return InstrumentClass.parse(value) if isinstance(value, str) else value

    @classmethod
    def of(cls, symbol: str, instrument_class: "str | InstrumentClass") -> "BatchItem":
        return cls(symbol=symbol, instrument_class=InstrumentClass.parse(instrument_class))


class MarketStatus(BaseModel):
    """Trading-session state for one instrument."""

    is_open: bool
    message: str
    next_open: datetime | None = None
    next_close: datetime | None = None


class PricePoint(BaseModel):
    """One point of a chart series."""

    time: datetime
    price: float
    volume: float = 0.0


@dataclass(frozen=True)
class RealTick:
    """Tick backed by a quote fetched from an upstream."""

    quote: Quote
    kind: Literal["real"] = "real"

    @property
    def price(self) -> float:
        return self.quote.price

    @property
    def volume(self) -> float:
        return self.quote.volume


@dataclass(frozen=True)
class SyntheticTick:
    """Tick fabricated locally because no real quote was available."""

    price: float
    volume: float = 0.0
    kind: Literal["synthetic"] = "synthetic"


TickOutcome = RealTick | SyntheticTick


class SeriesSnapshot(BaseModel):
    """Read view of a chart series plus derived change figures."""

    handle_id: str | None = None
    symbol: str
    instrument_class: InstrumentClass
    interval: str
    state: Literal["bootstrapping", "steady"]
    points: list[PricePoint]
    current_price: float
    change: float
    change_percent: float
    last_source: Literal["real", "synthetic"] | None = None


__all__ = [
    "BatchItem",
    "InstrumentClass",
    "MarketStatus",
    "PricePoint",
    "Quote",
    "RealTick",
    "SeriesSnapshot",
    "SyntheticTick",
    "TickOutcome",
    "utcnow",
]
