import os
from pydantic import Field
from pydantic_settings import BaseSettings
from functools import lru_cache

DEFAULT_SEED_FILE = os.path.join(os.path.dirname(__file__), "seed.yaml")


class Settings(BaseSettings):
    db_path: str = "./data/guessnica.db"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    admin_token: str = "SECRET"
    log_level: str = "INFO"

    # UTC hour at which a new game-day begins
    daily_rollover_hour_utc: int = Field(default=0, ge=0, le=23)

    seed_on_startup: bool = False
    seed_file: str = DEFAULT_SEED_FILE

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()
