from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import SUPPORTED_CURRENCY_ROWS


class SupportedCurrency(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    symbol: str
    name: str
    flag: str


SUPPORTED_CURRENCIES: List[SupportedCurrency] = [
    SupportedCurrency(code=code, symbol=symbol, name=name, flag=flag)
    for code, symbol, name, flag in SUPPORTED_CURRENCY_ROWS
]

_BY_CODE: Dict[str, SupportedCurrency] = {c.code: c for c in SUPPORTED_CURRENCIES}


def find_currency(code: Optional[str]) -> Optional[SupportedCurrency]:
    """Return display metadata for ``code`` or None when it is not supported."""
    if not code:
        return None
    return _BY_CODE.get(code)


class CurrencyPhase(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class CurrencyState(BaseModel):
    """Snapshot of the session currency preference as seen by UI consumers."""

    selected_currency: str
    detected_currency: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None
    phase: CurrencyPhase = CurrencyPhase.UNINITIALIZED
    rates_fetched_at: Optional[datetime] = None
    exchange_rates: Dict[str, float] = Field(default_factory=dict)
    selected: Optional[SupportedCurrency] = None


class SelectCurrencyPayload(BaseModel):
    currency: str = Field(..., min_length=3, max_length=3, description="ISO 4217 code")

    @field_validator("currency")
    @classmethod
    def upper(cls, v: str) -> str:
        return v.upper()


class ConversionOut(BaseModel):
    original_amount: float
    from_currency: str
    to_currency: str
    rate: float
    converted_amount: int
    formatted: str


class FormattedOut(BaseModel):
    currency: str
    formatted: str
