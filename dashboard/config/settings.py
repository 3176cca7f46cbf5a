from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    cors_origins: list[str] = ["*"]

    # GitHub REST API
    github_api_base: str = "https://api.github.com"
    github_api_version: str = "2022-11-28"
    github_user_agent: str = "EOYR-Dashboard/1.0"
    # GitHub caps per_page at 100; a shorter page means there is nothing left
    github_per_page: int = 100
    # Hard ceiling on commit pages per repository (bounds latency, not an error)
    github_max_pages: int = 20
    # Ceiling on /user/repos pages when listing selectable repositories
    github_repo_list_max_pages: int = 10

    # Commit query cache
    cache_ttl_seconds: int = 3600
    # Large payloads are held for a shorter time
    cache_large_ttl_seconds: int = 1800
    cache_large_threshold: int = 500
    # Window used when the caller gives no "from" date
    default_lookback_years: int = 2

    # Key-value store - empty redis_url = in-process TTL store
    redis_url: str = ""
    memory_cache_maxsize: int = 1024

    # Sessions and webhooks
    session_cookie_name: str = "eoyr_session"
    # Empty string = webhook endpoint rejects every delivery
    webhook_secret: str = ""

    # Optional query hardening (both off by default)
    # De-duplicate identical concurrent cold-cache computations in-process
    single_flight_enabled: bool = False
    # Include per-repository fetch status in the commits payload
    expose_repo_status: bool = False

    @property
    def redis_enabled(self) -> bool:
        """Check if a Redis store is configured."""
        return bool(self.redis_url)


settings = Settings()
