from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, DATA_DIR,
    DB_FILENAME, RATES_CACHE_TTL_SECONDS, CURRENCY_COOKIE_NAME).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "RideFX Currency Service"
    debug: bool = False
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "ridefx.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Read caches (rates / currency settings)
    rates_cache_ttl_seconds: int = 3600  # 1 hour
    currencies_cache_ttl_seconds: int = 3600
    fallback_cache_ttl_seconds: int = 300  # hard-coded tables are retried sooner
    rates_stale_after_hours: int = 24

    # Preference cookie
    currency_cookie_name: str = "preferred-currency"
    currency_cookie_max_age: int = 31536000  # 1 year
    default_locale: str = "en-US"

    # Rate refresh (Hexarate, no key required)
    rates_api_base_url: str = "https://hexarate.paikama.co/api/rates"
    http_timeout_seconds: float = 5.0
    http_retries: int = 2
    enable_rate_refresh: bool = True

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        # Ensure persistence directory exists
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        for name in (
            "rates_cache_ttl_seconds",
            "currencies_cache_ttl_seconds",
            "fallback_cache_ttl_seconds",
        ):
            value = getattr(self, name)
            if not (1 <= value <= 86400):
                raise ValueError(f"{name} must be between 1 and 86400 seconds, got {value}")
        if self.rates_stale_after_hours <= 0:
            raise ValueError("rates_stale_after_hours must be positive")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
