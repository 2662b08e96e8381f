from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from trader_goods_stub.db.engine import DEFAULT_DATABASE_URL


class Settings(BaseSettings):
    """Service settings, read from the environment (or ``.env``)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = DEFAULT_DATABASE_URL
    store_backend: Literal["memory", "postgres"] = "memory"
    expected_auth_header: str = "Bearer c29tZS10b2tlbgo="
    default_page_size: int = Field(default=500, gt=0)
    max_page_size: int = Field(default=2000, gt=0)
    schema_dir: Path | None = None
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
