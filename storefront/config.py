from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List

from storefront.schemas.pricing_schemas import FeeConfig, FeeMode


class Settings(BaseSettings):
    env: str = "local"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./storefront.db"

    # External services
    order_service_url: str = "http://localhost:5000"
    catalog_service_url: str = "http://localhost:5000"

    checkout_timeout_seconds: float = 15
    read_timeout_seconds: float = 10
    read_max_retries: int = 3
    read_backoff_base_seconds: float = 1
    read_backoff_max_seconds: float = 8
    catalog_cache_ttl_seconds: int = 5 * 60
    catalog_cache_max_entries: int = 512

    order_expiry_days: int = 7

    # Mercado Pago fee handling: absorb | pass_through
    mp_fee_mode: FeeMode = "absorb"
    mp_fee_percent: float = 0
    mp_fee_fixed: float = 0
    mp_fee_label: str = "Recargo Mercado Pago"

    allowed_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]

    @field_validator("mp_fee_mode", mode="before")
    @classmethod
    def _normalize_fee_mode(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @property
    def fee_config(self) -> FeeConfig:
        return FeeConfig(
            mode=self.mp_fee_mode,
            percent=self.mp_fee_percent,
            fixed=self.mp_fee_fixed,
            label=self.mp_fee_label,
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()
