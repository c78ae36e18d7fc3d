import sqlite3

from fastapi import APIRouter, Depends

from ridefx.core.config import Settings
from ridefx.db.dal import Database
from .deps import get_app_settings, get_db

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness and database check")
async def health(
    settings: Settings = Depends(get_app_settings), db: Database = Depends(get_db)
):
    try:
        db.get_default_currency_code()
        database = "ok"
    except sqlite3.Error:
        database = "unavailable"
    return {"status": "ok", "version": settings.version, "database": database}
