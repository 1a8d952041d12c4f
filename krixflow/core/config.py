# krixflow/core/config.py
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # tell pydantic-settings to load from .env
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongo_uri: str = "mongodb://localhost:27017"
    db_name: str = "krixflow"

    secret_key: str = "change-me-access-secret"
    refresh_secret_key: str = "change-me-refresh-secret"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 7

    # items below this quantity show up in the low stock report
    low_stock_threshold: int = 5

    cors_origins: List[str] = ["*"]

    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None
    log_max_size_mb: int = 10
    log_backup_count: int = 5


settings = Settings()
