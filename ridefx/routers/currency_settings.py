from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ridefx.db.dal import Database
from ridefx.models.currency import CurrencySetting
from ridefx.services.currency import settings as currency_settings
from ridefx.services.currency.rates import RateStore
from .deps import get_db, get_rate_store

router = APIRouter(prefix="/admin/currencies", tags=["admin"])


class EnabledIn(BaseModel):
    is_enabled: bool


class FeaturedIn(BaseModel):
    is_featured: bool


class OrderIn(BaseModel):
    display_order: int = Field(..., ge=0)


def _apply(fn, *args) -> CurrencySetting:
    try:
        return fn(*args)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get("", response_model=List[CurrencySetting], summary="All currencies (admin)")
async def list_currencies(db: Database = Depends(get_db)):
    return currency_settings.list_all_currencies(db)


@router.put("/{code}/enabled", response_model=CurrencySetting, summary="Enable / disable")
async def set_enabled(
    code: str,
    payload: EnabledIn,
    db: Database = Depends(get_db),
    store: RateStore = Depends(get_rate_store),
):
    return _apply(currency_settings.toggle_currency_enabled, db, code, payload.is_enabled, store)


@router.put("/{code}/featured", response_model=CurrencySetting, summary="Feature / unfeature")
async def set_featured(
    code: str,
    payload: FeaturedIn,
    db: Database = Depends(get_db),
    store: RateStore = Depends(get_rate_store),
):
    return _apply(currency_settings.toggle_currency_featured, db, code, payload.is_featured, store)


@router.put("/{code}/default", response_model=CurrencySetting, summary="Make default currency")
async def set_default(
    code: str,
    db: Database = Depends(get_db),
    store: RateStore = Depends(get_rate_store),
):
    return _apply(currency_settings.set_default_currency, db, code, store)


@router.put("/{code}/order", response_model=CurrencySetting, summary="Change display order")
async def set_order(
    code: str,
    payload: OrderIn,
    db: Database = Depends(get_db),
    store: RateStore = Depends(get_rate_store),
):
    return _apply(currency_settings.update_currency_order, db, code, payload.display_order, store)
