from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "VisiAI"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Storage: "database" or "memory"
    store_backend: str = "database"
    database_url: str = "sqlite+aiosqlite:///./visiai.db"

    # Fetching
    fetch_timeout: float = 15.0
    max_redirects: int = 5
    max_response_bytes: int = 5 * 1024 * 1024
    user_agent: str = "Mozilla/5.0 (compatible; VisiAIBot/1.0; +https://example.com/bot)"

    # Screenshots (Playwright)
    screenshot_enabled: bool = False
    screenshot_timeout: float = 20.0
    viewport_width: int = 1280
    viewport_height: int = 800

    # Analyzers
    analyzer_timeout: float = 10.0
    vision_timeout: float = 30.0
    vision_api_url: str | None = None
    vision_api_key: str | None = None
    max_zones: int = 6
    max_recommendations: int = 8

    # Store writes
    store_timeout: float = 5.0


settings = Settings()
