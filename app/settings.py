from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    log_level: str = "INFO"

    # Infra
    redis_url: str = "redis://redis:6379/0"
    redis_socket_timeout_seconds: float = 5.0

    # Security / policies
    password_scheme: str = "hex_md5"
    bcrypt_rounds: int = 12
    code_ttl_seconds: int = 300
    code_min_interval_seconds: int = 60

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
