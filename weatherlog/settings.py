from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized configuration.

    Loaded from:
    - environment variables
    - .env file (if present)

    An instance is built by the app factory and passed down; nothing
    reads settings from module scope.
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Upstream keys. Missing keys surface as upstream rejections at call time.
    openweather_api_key: str = ""
    youtube_api_key: str = ""

    app_name: str = "Weather Logs"

    # SQLite by default (simple local persistence)
    database_url: str = "sqlite:///weather_logs.sqlite3"

    # Per outbound call
    http_timeout_s: float = 10.0

    # Provider horizon for daily forecast cards
    forecast_max_days: int = 5

    log_level: str = "INFO"
