from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"
    api_prefix: str = "/api-imovel-finder"

    # Postgres
    database_url: str = "postgresql://app:app@db:5432/app"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_connect_timeout_seconds: int = 3

    # Redis (session store)
    redis_url: str = "redis://redis:6379/0"
    redis_connect_timeout_seconds: float = 3.0

    # Mail relay
    smtp_base_url: str = "http://mail-relay:8025"
    mail_sender: str = "no-reply@imovelfinder.local"

    # Auth
    bcrypt_rounds: int = 12
    session_ttl_seconds: int = 86400  # 0 -> sessions never expire
    token_backend: Literal["redis", "memory"] = "redis"
    require_verified_email: bool = False

    # Email verification
    verification_code_digits: int = 6
    resend_throttle_seconds: int = 60

    # Outbox worker
    outbox_poll_interval_ms: int = 500
    outbox_batch_size: int = 10
    outbox_retry_base_seconds: int = 2
    outbox_retry_max_seconds: int = 300

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
