from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    App settings.

    Notes:
    - Defaults are local and deterministic; override via env vars (prefix APP_).
    - The token secret has no default: without it no request can authenticate.
    """

    model_config = SettingsConfigDict(env_prefix="APP_", extra="ignore")

    db_url: str | None = None
    isolation_config_path: str | None = None
    log_level: str = "INFO"

    token_secret: str | None = None
    token_issuer: str = "contract-authz"
    token_audience: str = "contract-authz-api"
    token_leeway_seconds: int = 30

    # Request header carrying the company the caller is acting in.
    company_header: str = "X-Company-Id"

    def resolved_db_url(self) -> str:
        if self.db_url:
            return self.db_url

        repo_root = Path(__file__).resolve().parents[1]
        db_path = repo_root / "app.db"
        return f"sqlite:///{db_path}"

    def resolved_isolation_config_path(self) -> Path:
        if self.isolation_config_path:
            return Path(self.isolation_config_path)

        repo_root = Path(__file__).resolve().parents[1]
        return repo_root / "config" / "isolation.yaml"


@lru_cache
def get_settings() -> Settings:
    return Settings()
