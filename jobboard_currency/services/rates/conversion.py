from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Union

from jobboard_currency.services.money import round_whole

"""Cross-currency conversion through the base currency.

Given a table of units-per-base-unit, an amount in ``from_currency`` is first
expressed in the base currency and then in ``to_currency``, and the result is
rounded to a whole unit. A currency missing from the table converts at 1.
An empty table means "no rates": every amount passes through untouched, as
does a same-currency conversion.
"""


@dataclass(frozen=True)
class ConversionResult:
    original_amount: float
    from_currency: str
    to_currency: str
    rate: float
    converted_amount: Union[int, float]


def _rate_for(rates: Mapping[str, float], currency: str, base: str) -> float:
    if currency == base:
        return 1.0
    return rates.get(currency) or 1.0


def convert_amount(
    amount: float,
    from_currency: str,
    to_currency: str,
    rates: Mapping[str, float],
    base: str = "USD",
) -> ConversionResult:
    if not rates or from_currency == to_currency:
        return ConversionResult(
            original_amount=amount,
            from_currency=from_currency,
            to_currency=to_currency,
            rate=1.0,
            converted_amount=amount,
        )
    from_rate = _rate_for(rates, from_currency, base)
    to_rate = _rate_for(rates, to_currency, base)
    base_amount = amount / from_rate
    return ConversionResult(
        original_amount=amount,
        from_currency=from_currency,
        to_currency=to_currency,
        rate=to_rate / from_rate,
        converted_amount=round_whole(base_amount * to_rate),
    )
