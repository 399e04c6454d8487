from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    currency_code: str = Field("USD", alias="CURRENCY_CODE")
    expense_category_id: int = Field(18, alias="EXPENSE_CATEGORY_ID")
    discrepancy_tolerance: Decimal = Field(Decimal("0.02"), alias="DISCREPANCY_TOLERANCE")
    calculation_warning_tolerance: Decimal = Field(Decimal("0.015"), alias="CALCULATION_WARNING_TOLERANCE")
    default_store_name: str = Field("Unknown Store", alias="DEFAULT_STORE_NAME")
    log_level: str = Field("INFO", alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
