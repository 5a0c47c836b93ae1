from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/hirely.db"

    # Credential service
    secret_key: str = "dev-secret-key-change-in-production"
    token_expire_minutes: int = 60
    bcrypt_rounds: int = 10

    # Frontend SPA origin(s)
    cors_origins: list[str] = ["http://localhost:5173"]

    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
