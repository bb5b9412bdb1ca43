"""Settings for the CRM service.

Values come from ``CRM_*`` environment variables (e.g. ``CRM_LOG_LEVEL=DEBUG``)
and are validated by pydantic-settings.
"""

from functools import lru_cache
from typing import Any, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CRM_")

    app_title: str = "Seller CRM Service"
    app_version: str = "1.0.0"

    log_level: str = "INFO"
    log_file: Optional[str] = None  # e.g. "logs/crm.log"; console only when unset
    log_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)  # 10 MB
    log_backup_count: int = Field(default=5, ge=0)

    # load demo sellers/transactions on startup
    seed_on_startup: bool = True


def load_settings(overrides: Optional[dict[str, Any]] = None) -> Settings:
    return Settings(**(overrides or {}))


@lru_cache
def get_settings() -> Settings:
    return load_settings()
