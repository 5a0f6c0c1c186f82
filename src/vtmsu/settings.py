"""
vtmsu.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide env-driven settings for persistence, auth and the HTTP layer.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="VTMSU_", case_sensitive=False)

    # dev/test create tables on startup; prod runs Alembic migrations.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "vtmsu"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "vtmsu"
    jwt_audience: str = "vtmsu-api"
    jwt_secret: str = Field(default="dev-secret-change-me-before-deploying", repr=False)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./vtmsu.db"
    sql_echo: bool = False

    # Upper bound for list endpoints.
    list_limit: int = Field(default=200, ge=1, le=1000)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# The table-name prefix is not configurable here: it is part of the schema and
# lives in `vtmsu.db.base`.
