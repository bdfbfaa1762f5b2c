"""Settings for the application."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the application."""

    model_config = SettingsConfigDict(env_prefix="ANIME_BOT_")

    api_name: str = Field("Anime Bot API", description="The name of the API")
    api_version: str = Field("0.1.0", description="The version of the API")
    metrics_prefix: str = Field("anime_bot", description="Prefix of the Prometheus metric names")

    database_path: str = Field("storage/anime_bot.db", description="Path to the SQLite database file")
    database_timeout: float = Field(5.0, description="Seconds to wait for a locked database")

    redis_url: str = Field("redis://localhost:6379/0", description="Redis URL of the message bus")
    notifications_channel: str = Field(
        "anime-bot:notifications",
        description="Pub/sub channel the delivery worker listens on",
    )

    inline_results_limit: int = Field(50, description="Maximum number of inline query results")
    webhook_secret: str | None = Field(
        None,
        description="Expected X-Telegram-Bot-Api-Secret-Token header; disabled when unset",
    )


settings = Settings()  # type: ignore
