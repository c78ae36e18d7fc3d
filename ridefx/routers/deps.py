"""Shared FastAPI dependencies.

Settings and the rate store live on ``app.state`` (set by ``create_app``) so
each application instance, including test instances built with a temporary
database, gets its own cache.
"""

from fastapi import Depends, Request

from ridefx.core.config import Settings
from ridefx.db.dal import Database
from ridefx.services.currency.rates import RateStore
from ridefx.services.currency.refresh import RateClient, make_rate_client


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(settings: Settings = Depends(get_app_settings)) -> Database:
    return Database(settings.db_path)


def get_rate_store(request: Request) -> RateStore:
    return request.app.state.rate_store


def get_rate_client(settings: Settings = Depends(get_app_settings)) -> RateClient:
    return make_rate_client(settings)
