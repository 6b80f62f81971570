from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request
from typing import List, Optional

from jobboard_currency.models.currency import (
    SUPPORTED_CURRENCIES,
    ConversionOut,
    CurrencyState,
    FormattedOut,
    SelectCurrencyPayload,
    SupportedCurrency,
)
from jobboard_currency.services.money import round_whole
from jobboard_currency.services.currency_service import CurrencyService

"""Currency router consumed by the job-board UI (job cards, pricing cards, header selector).

Endpoints:
    - GET  /currency            -> session state snapshot
    - GET  /currency/supported  -> static supported currency list
    - PUT  /currency/selected   -> explicit user selection {currency}
    - GET  /currency/convert    -> convert an amount (defaults to selected currency)
    - GET  /currency/format     -> symbol + grouped amount
    - POST /currency/refresh    -> drop cached rates and refetch

Rate failures never produce an error status here; they show up as the
``error`` field of the state snapshot.
"""

router = APIRouter(prefix="/currency", tags=["currency"])


def get_service(request: Request) -> CurrencyService:
    return request.app.state.currency_service


@router.get("", summary="Current currency preference and rates", response_model=CurrencyState)
async def read_state(svc: CurrencyService = Depends(get_service)) -> CurrencyState:
    return svc.state()


@router.get("/supported", summary="Supported display currencies", response_model=List[SupportedCurrency])
async def list_supported() -> List[SupportedCurrency]:
    return SUPPORTED_CURRENCIES


@router.put("/selected", summary="Set the user's display currency", response_model=CurrencyState)
async def select_currency(
    payload: SelectCurrencyPayload,
    svc: CurrencyService = Depends(get_service),
) -> CurrencyState:
    svc.set_selected_currency(payload.currency)
    return svc.state()


@router.get("/convert", summary="Convert an amount for display", response_model=ConversionOut)
async def convert(
    amount: float = Query(..., allow_inf_nan=False),
    from_currency: str = Query(..., min_length=3, max_length=3),
    to_currency: Optional[str] = Query(None, min_length=3, max_length=3),
    svc: CurrencyService = Depends(get_service),
) -> ConversionOut:
    result = svc.convert_detailed(
        amount,
        from_currency.upper(),
        to_currency.upper() if to_currency else None,
    )
    return ConversionOut(
        original_amount=result.original_amount,
        from_currency=result.from_currency,
        to_currency=result.to_currency,
        rate=result.rate,
        converted_amount=round_whole(result.converted_amount),
        formatted=svc.format(result.converted_amount, result.to_currency),
    )


@router.get("/format", summary="Format an amount with a currency symbol", response_model=FormattedOut)
async def format_amount(
    amount: float = Query(..., allow_inf_nan=False),
    currency: Optional[str] = Query(None, min_length=3, max_length=3),
    svc: CurrencyService = Depends(get_service),
) -> FormattedOut:
    code = currency.upper() if currency else svc.selected_currency
    return FormattedOut(currency=code, formatted=svc.format(amount, code))


@router.post("/refresh", summary="Refetch exchange rates", response_model=CurrencyState)
def refresh_rates(svc: CurrencyService = Depends(get_service)) -> CurrencyState:
    svc.refresh()
    return svc.state()
