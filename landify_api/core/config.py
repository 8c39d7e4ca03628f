"""Configuration and settings"""

from typing import List, Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # OpenAI API
    openai_api_key: str = Field(default="")
    openai_model: str = Field(default="gpt-4o-mini")
    openai_timeout_seconds: float = Field(default=60.0, gt=0)

    # Google Maps API
    google_maps_api_key: str = Field(default="")

    # Pipeline
    pipeline_strategy: Literal["thorough", "fast"] = "thorough"
    synthesis_policy: Literal["strict", "fallback"] = "fallback"
    enable_critique: bool = True

    # Page storage
    page_store_dir: str = Field(default="./data/landing-pages")

    # Rate limiting (per client, fixed window)
    rate_limit_window_seconds: int = Field(default=900, gt=0)
    rate_limit_max_requests: int = Field(default=100, gt=0)

    # Server
    backend_host: str = "localhost"
    backend_port: int = 8000
    log_level: str = "INFO"

    # Frontend / CORS
    frontend_url: str = "http://localhost:5173"
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # API Configuration
    api_title: str = "Landify API"
    api_version: str = "0.1.0"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @property
    def cors_origins(self) -> List[str]:
        """FRONTEND_URL plus the comma-separated ALLOWED_ORIGINS, deduplicated"""
        origins = [self.frontend_url] + [o.strip() for o in self.allowed_origins.split(",")]
        return list(dict.fromkeys(o for o in origins if o))


# Global settings instance
settings = Settings()
