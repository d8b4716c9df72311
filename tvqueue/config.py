from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings"""

    # App
    environment: Literal["development", "production"] = "development"
    frontend_url: str = "http://localhost:5173"

    # API
    api_prefix: str = "/api"

    # Supabase
    supabase_url: str
    supabase_key: str

    # YouTube Data API (rotated round-robin)
    google_api_key: str | None = None
    google_api_key_2: str | None = None
    google_api_key_3: str | None = None

    # Search
    search_keyword: str = "karaoke"
    search_max_results: int = 20
    search_timeout_seconds: float = 10.0

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def youtube_api_keys(self) -> list[str]:
        """Configured YouTube API keys, in rotation order"""
        keys = [self.google_api_key, self.google_api_key_2, self.google_api_key_3]
        return [key for key in keys if key]

    @property
    def allowed_cors_origins(self) -> list[str]:
        """CORS allowed origins"""
        return [self.frontend_url]

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def debug(self) -> bool:
        return self.environment == "development"


@lru_cache()
def get_settings():
    return Settings()
