"""Pydantic domain models for the job-board currency service."""

from .constants import (
    SUPPORTED_CODES,
    COUNTRY_CURRENCY,
)  # re-export
from .currency import (
    SUPPORTED_CURRENCIES,
    SupportedCurrency,
    CurrencyPhase,
    CurrencyState,
    SelectCurrencyPayload,
    ConversionOut,
    FormattedOut,
    find_currency,
)

__all__ = [
    "SUPPORTED_CODES",
    "COUNTRY_CURRENCY",
    "SUPPORTED_CURRENCIES",
    "SupportedCurrency",
    "CurrencyPhase",
    "CurrencyState",
    "SelectCurrencyPayload",
    "ConversionOut",
    "FormattedOut",
    "find_currency",
]
