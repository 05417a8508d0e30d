"""Application configuration loaded from environment variables."""
import os
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Local cache
    data_path: str = os.getenv(
        "DATA_PATH",
        os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
    )

    @property
    def cache_path(self) -> str:
        return os.path.join(self.data_path, "local_cache.db")

    # Remote record store
    remote_base_url: str = "http://localhost:8081/api"
    remote_timeout: float = 10.0
    use_memory_remote: bool = False

    # Session
    user_id: Optional[str] = None
    access_token: Optional[str] = None

    # API configuration
    api_host: str = "127.0.0.1"
    api_port: int = 8082
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    class Config:
        env_prefix = "WELLBEING_"


@lru_cache
def get_settings() -> Settings:
    return Settings()
