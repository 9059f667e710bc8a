from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    report_version: str = "2024-03-01.v1"

    # ---- Server (used by main.run) ----
    host: str = "127.0.0.1"
    port: int = 8000

    # ---- CORS (used by main.py) ----
    cors_allow_origins: list[str] | str = ["*"]

    # ---- Revenue report ----
    cash_window_months: int = 12
    recent_payments_limit: int = 50
    currency: str = "usd"

    def model_post_init(self, __context) -> None:
        if self.cash_window_months < 1:
            raise ValueError("cash_window_months must be >= 1")
        if self.recent_payments_limit < 0:
            raise ValueError("recent_payments_limit must be >= 0")

        env = (self.app_env or "local").strip().lower()
        if env in ("prod", "production"):
            origins = self.cors_allow_origins
            if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
                raise ValueError("SECURITY: cors_allow_origins wildcard is not allowed in prod")


settings = Settings()
