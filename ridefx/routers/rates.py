from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import Dict, Optional

from ridefx.core.config import Settings
from ridefx.db.dal import Database
from ridefx.models.constants import BASE_CURRENCY
from ridefx.services.currency.rates import RateStore
from ridefx.services.currency.refresh import RateClient, refresh_exchange_rates
from .deps import get_app_settings, get_db, get_rate_client, get_rate_store

"""Rates router: cached exchange rates, status and manual refresh.

Endpoints:
    - GET  /rates          -> AED-based rates as used for conversion
    - GET  /rates/status   -> last update, staleness, count (admin panel)
    - POST /rates/refresh  -> refresh from Hexarate (guarded by settings.enable_rate_refresh)
"""

router = APIRouter(prefix="/rates", tags=["rates"])


def require_refresh_enabled(settings: Settings = Depends(get_app_settings)):
    if not settings.enable_rate_refresh:
        raise HTTPException(status_code=403, detail="rate refresh feature disabled")
    return True


class RatesOut(BaseModel):
    base: str
    rates: Dict[str, float]
    used_fallback: bool


class RateStatusOut(BaseModel):
    last_updated: Optional[str]
    is_stale: bool
    rate_count: int
    rates: Dict[str, float]
    used_fallback: bool


class RefreshPayload(BaseModel):
    force: bool = Field(True, description="Refresh even when stored rates are fresh")


@router.get("", response_model=RatesOut, summary="Current exchange rates (base AED)")
async def get_rates(store: RateStore = Depends(get_rate_store)):
    result = store.fetch_rates()
    return RatesOut(base=BASE_CURRENCY, rates=dict(result.value), used_fallback=result.used_fallback)


@router.get("/status", response_model=RateStatusOut, summary="Exchange rate freshness")
async def rate_status(store: RateStore = Depends(get_rate_store)):
    return RateStatusOut(**store.status())


@router.post("/refresh", summary="Refresh exchange rates from the provider")
async def refresh_rates(
    payload: Optional[RefreshPayload] = None,
    _: bool = Depends(require_refresh_enabled),
    db: Database = Depends(get_db),
    store: RateStore = Depends(get_rate_store),
    client: RateClient = Depends(get_rate_client),
    settings: Settings = Depends(get_app_settings),
):
    force = payload.force if payload is not None else True
    result = await refresh_exchange_rates(
        db,
        client,
        store=store,
        force=force,
        stale_after_hours=settings.rates_stale_after_hours,
    )
    return JSONResponse(status_code=200 if result.success else 502, content=result.to_dict())
