from __future__ import annotations
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

from .constants import SYMBOL_POSITIONS


class CurrencyInfo(BaseModel):
    """Public view of an enabled currency (what selectors and price widgets use)."""

    code: str
    name: str
    symbol: str
    decimal_places: int = Field(2, ge=0, le=4)
    is_default: bool = False
    is_featured: bool = False
    display_order: int = 0

    @field_validator("code")
    @classmethod
    def valid_code(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError("currency code must be 3 letters")
        return v

    @classmethod
    def from_row(cls, row: dict) -> "CurrencyInfo":
        return cls(
            code=row["currency_code"],
            name=row["name"],
            symbol=row["symbol"],
            decimal_places=row["decimal_places"],
            is_default=bool(row["is_default"]),
            is_featured=bool(row["is_featured"]),
            display_order=row["display_order"],
        )


class CurrencySetting(CurrencyInfo):
    """Full admin row, including disabled currencies."""

    symbol_position: str = "before"
    is_enabled: bool = False
    updated_at: Optional[str] = None

    @field_validator("symbol_position")
    @classmethod
    def valid_position(cls, v: str) -> str:
        if v not in SYMBOL_POSITIONS:
            raise ValueError(f"symbol_position must be one of {SYMBOL_POSITIONS}")
        return v

    @classmethod
    def from_row(cls, row: dict) -> "CurrencySetting":
        return cls(
            code=row["currency_code"],
            name=row["name"],
            symbol=row["symbol"],
            decimal_places=row["decimal_places"],
            symbol_position=row["symbol_position"],
            is_enabled=bool(row["is_enabled"]),
            is_default=bool(row["is_default"]),
            is_featured=bool(row["is_featured"]),
            display_order=row["display_order"],
            updated_at=row.get("updated_at"),
        )


class PreferenceOut(BaseModel):
    code: str
    source: Literal["cookie", "browser", "default"]
