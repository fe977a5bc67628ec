"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = "dev"

    # API Security (bearer token accepted by the fetch proxy and jobs API)
    api_key: str = "dev-secret"

    # Fetch proxy
    fetch_page_url: str = "http://localhost:8000/api/content-migration/fetch-page"
    request_timeout: float = 30.0
    user_agent: str = "Content-Migration-Bot/1.0"
    upstream_max_attempts: int = 3

    # Crawling
    default_max_pages: int = 100
    default_crawl_delay_ms: int = 1500
    pause_poll_interval: float = 0.5

    # Export
    output_dir: str = "content-migration"

    # Logging
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env.lower() == "prod"


# Global settings instance
settings = Settings()
