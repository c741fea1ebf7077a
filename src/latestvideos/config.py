from __future__ import annotations

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="", case_sensitive=False)

    # Channel page used when the request carries no ?url=
    DEFAULT_CHANNEL_URL: str = Field(
        default="https://www.youtube.com/@thevaluationschool",
        description="Channel page resolved when the caller passes no url",
    )

    # Last fallback when neither ?channelId= nor resolution produce an id.
    # Leave empty to fail the request instead.
    DEFAULT_CHANNEL_ID: Optional[str] = Field(
        default="UCYqhvzHrm7JVGx8wXlmvC-w", description="Channel id used when resolution fails"
    )

    FEED_URL_TEMPLATE: str = Field(
        default="https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"
    )
    THUMBNAIL_URL_TEMPLATE: str = Field(default="https://img.youtube.com/vi/{video_id}/hqdefault.jpg")

    # Number of feed entries returned per request
    FEED_ENTRY_LIMIT: int = Field(default=3, ge=1)

    # Total timeout for each outbound request (seconds)
    HTTP_TIMEOUT_SEC: float = Field(default=5.0, gt=0)

    USER_AGENT: str = Field(
        default=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/119.0 Safari/537.36"
        ),
        description="Browser-like User-Agent; some pages reject requests without one",
    )

    WEB_HOST: str = Field(default="127.0.0.1", description="Host for the HTTP server")
    WEB_PORT: int = Field(default=8080, description="Port for the HTTP server")

    LOG_LEVEL: str = Field(default="INFO")

    def default_channel_id(self) -> Optional[str]:
        value = (self.DEFAULT_CHANNEL_ID or "").strip()
        return value or None

    def log_level(self) -> int:
        level = logging.getLevelName(self.LOG_LEVEL.strip().upper())
        if isinstance(level, int):
            return level
        # unknown names come back as "Level X"
        return logging.INFO
