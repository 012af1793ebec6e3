from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # `.env.prod` takes priority over `.env`
        env_file=(".env", ".env.prod"),
        extra="ignore",
    )

    # Token signing secret. Left unset the app still boots; login and
    # protected routes answer 500 until it is configured.
    jwt_secret: Optional[str] = None
    token_expires_seconds: int = 3600

    # bcrypt work factor
    password_hash_rounds: int = 10

    log_level: str = "INFO"
    log_format: str = "json"

    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    host: str = "0.0.0.0"
    port: int = 3000


@lru_cache()
def get_settings() -> Settings:
    return Settings()
