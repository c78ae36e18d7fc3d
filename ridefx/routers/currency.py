from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, Response
from pydantic import BaseModel, Field

from ridefx.core.config import Settings
from ridefx.models.constants import BASE_CURRENCY
from ridefx.models.currency import CurrencyInfo, PreferenceOut
from ridefx.services.currency.format import (
    convert_amount,
    format_amount,
    format_display_price,
    format_price_range,
)
from ridefx.services.currency.metadata import get_currency_flag, is_valid_currency_code
from ridefx.services.currency.preference import (
    CurrencyPreference,
    ServerCookiePreferenceStore,
    resolve_currency,
)
from ridefx.services.currency.rates import RateStore
from .deps import get_app_settings, get_rate_store

"""Currency router: visitor preference, currency list and price formatting.

Endpoints:
    - GET    /currency/preference     -> resolved preference (cookie > browser > default)
    - PUT    /currency/preference     -> persist an explicit choice in the cookie
    - DELETE /currency/preference     -> forget the explicit choice
    - GET    /currency/currencies     -> enabled (or featured) currencies for selectors
    - GET    /currency/format         -> convert + format one amount
    - GET    /currency/format-range   -> convert + format a min/max pair
    - GET    /currency/display-price  -> converted price with the base amount charged
"""

router = APIRouter(prefix="/currency", tags=["currency"])


class PreferenceIn(BaseModel):
    code: str = Field(..., min_length=3, max_length=3, description="ISO 4217 code")


class CurrencyOut(CurrencyInfo):
    flag: str


class CurrencyListOut(BaseModel):
    default_currency: str
    currencies: List[CurrencyOut]
    used_fallback: bool


class FormattedOut(BaseModel):
    currency: str
    amount: float
    formatted: str


class DisplayPriceOut(BaseModel):
    currency: str
    display_amount: str
    original_amount: str
    is_converted: bool


def preference_store(
    request: Request, response: Response, settings: Settings = Depends(get_app_settings)
) -> ServerCookiePreferenceStore:
    return ServerCookiePreferenceStore(
        request,
        response,
        cookie_name=settings.currency_cookie_name,
        max_age=settings.currency_cookie_max_age,
    )


def current_preference(
    accept_language: Optional[str] = Header(None),
    prefs: ServerCookiePreferenceStore = Depends(preference_store),
    store: RateStore = Depends(get_rate_store),
) -> CurrencyPreference:
    return resolve_currency(prefs.get(), accept_language, store.get_enabled_currency_codes())


def _target_currency(
    currency: Optional[str], preference: CurrencyPreference
) -> str:
    if currency is None:
        return preference.code
    code = currency.upper()
    if not is_valid_currency_code(code):
        raise HTTPException(status_code=400, detail=f"Unsupported currency {code}")
    return code


@router.get("/preference", response_model=PreferenceOut, summary="Resolve display currency")
async def get_preference(preference: CurrencyPreference = Depends(current_preference)):
    return PreferenceOut(code=preference.code, source=preference.source)


@router.put("/preference", response_model=PreferenceOut, summary="Set display currency")
async def set_preference(
    payload: PreferenceIn,
    prefs: ServerCookiePreferenceStore = Depends(preference_store),
    store: RateStore = Depends(get_rate_store),
):
    code = payload.code.upper()
    if not is_valid_currency_code(code):
        raise HTTPException(status_code=400, detail=f"Unsupported currency {code}")
    if not store.is_currency_enabled(code):
        raise HTTPException(status_code=400, detail=f"Currency {code} is not enabled")
    prefs.set(code)
    return PreferenceOut(code=code, source="cookie")


@router.delete("/preference", response_model=PreferenceOut, summary="Clear display currency")
async def clear_preference(
    accept_language: Optional[str] = Header(None),
    prefs: ServerCookiePreferenceStore = Depends(preference_store),
    store: RateStore = Depends(get_rate_store),
):
    prefs.clear()
    resolved = resolve_currency(None, accept_language, store.get_enabled_currency_codes())
    return PreferenceOut(code=resolved.code, source=resolved.source)


@router.get("/currencies", response_model=CurrencyListOut, summary="List enabled currencies")
async def list_currencies(
    featured: bool = Query(False, description="Only featured currencies"),
    store: RateStore = Depends(get_rate_store),
):
    result = store.fetch_featured_currencies() if featured else store.fetch_enabled_currencies()
    return CurrencyListOut(
        default_currency=store.get_default_currency(),
        currencies=[
            CurrencyOut(**c.model_dump(), flag=get_currency_flag(c.code)) for c in result.value
        ],
        used_fallback=result.used_fallback,
    )


@router.get("/format", response_model=FormattedOut, summary="Convert and format an amount")
async def format_one(
    amount: float = Query(..., description="Amount in the source currency"),
    currency: Optional[str] = Query(None, description="Target currency (defaults to preference)"),
    source: str = Query(BASE_CURRENCY, description="Source currency"),
    show_code: bool = Query(False),
    locale: Optional[str] = Query(None, description="Grouping locale, e.g. de-DE"),
    preference: CurrencyPreference = Depends(current_preference),
    store: RateStore = Depends(get_rate_store),
    settings: Settings = Depends(get_app_settings),
):
    target = _target_currency(currency, preference)
    rates: Dict[str, float] = store.get_rates()
    converted = convert_amount(amount, source.upper(), target, rates)
    formatted = format_amount(
        converted, target, show_code=show_code, locale=locale or settings.default_locale
    )
    return FormattedOut(currency=target, amount=converted, formatted=formatted)


@router.get("/format-range", summary="Convert and format a price range")
async def format_range(
    min_amount: float = Query(..., alias="min"),
    max_amount: float = Query(..., alias="max"),
    currency: Optional[str] = Query(None),
    locale: Optional[str] = Query(None),
    preference: CurrencyPreference = Depends(current_preference),
    store: RateStore = Depends(get_rate_store),
    settings: Settings = Depends(get_app_settings),
):
    if min_amount > max_amount:
        raise HTTPException(status_code=400, detail="min must not exceed max")
    target = _target_currency(currency, preference)
    formatted = format_price_range(
        min_amount, max_amount, target, store.get_rates(), locale=locale or settings.default_locale
    )
    return {"currency": target, "formatted": formatted}


@router.get("/display-price", response_model=DisplayPriceOut, summary="Price for checkout screens")
async def display_price(
    amount: float = Query(..., description="Amount in the base currency"),
    currency: Optional[str] = Query(None),
    preference: CurrencyPreference = Depends(current_preference),
    store: RateStore = Depends(get_rate_store),
):
    target = _target_currency(currency, preference)
    price = format_display_price(amount, target, store.get_rates())
    return DisplayPriceOut(
        currency=target,
        display_amount=price.display_amount,
        original_amount=price.original_amount,
        is_converted=price.is_converted,
    )
