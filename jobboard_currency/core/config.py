from functools import lru_cache
from pathlib import Path
from typing import Optional
from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

from jobboard_currency.models.constants import SUPPORTED_CODES

ALLOWED_RATE_PROVIDERS = {"static", "external-http"}


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, DATA_DIR,
    DEFAULT_CURRENCY, RATES_CACHE_TTL_SECONDS, GEOLOCATION_TIMEOUT_SECONDS).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Job Board Currency Service"
    debug: bool = True
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "currency.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Currencies
    base_currency: str = "USD"  # rate tables are anchored here
    default_currency: str = "GBP"  # used when geolocation fails
    initial_currency: str = "USD"  # selection before detection resolves

    # Exchange rates / caching
    rates_cache_ttl_seconds: int = 6 * 60 * 60  # 6 hours
    exchange_api_url: AnyHttpUrl = "https://api.exchangerate-api.com/v4/latest/USD"
    http_timeout_seconds: float = 5.0
    http_retries: int = 1

    # Allowed: 'external-http' (live provider), 'static' (fixed offline table)
    exchange_rate_provider: str = "external-http"

    # Geolocation
    geolocation_url: AnyHttpUrl = "https://ipapi.co/json/"
    geolocation_timeout_seconds: float = 3.0

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        self.data_dir.mkdir(parents=True, exist_ok=True)
        if self.exchange_rate_provider not in ALLOWED_RATE_PROVIDERS:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. Allowed: {ALLOWED_RATE_PROVIDERS}"
            )
        for field in ("default_currency", "initial_currency"):
            code = getattr(self, field).upper()
            if code not in SUPPORTED_CODES:
                raise ValueError(f"{field} '{code}' is not a supported currency")
            setattr(self, field, code)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
