"""Application settings and configuration.

This module defines all configuration options for the PairDrop Stage relay.
Settings are loaded from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Final

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Seconds without a refresh after which a connection record has expired.
INACTIVITY_TIMEOUT_SECONDS: Final[int] = 30
# Seconds after which an undelivered voice message is abandoned.
MESSAGE_STALE_SECONDS: Final[int] = 300
# Container used by the browser recorder (audio/webm;codecs=opus).
AUDIO_EXTENSION: Final[str] = ".webm"
MAX_UPLOAD_BYTES: Final[int] = 5 * 1024 * 1024
LOCK_TIMEOUT_SECONDS: Final[float] = 5.0


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="PairDrop Stage", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Filesystem layout: <storage_root>/connections and <storage_root>/audio
    storage_root: Path = Field(default=Path("./data"), alias="STORAGE_ROOT")

    # Session lifecycle windows
    inactivity_timeout_seconds: float = Field(
        default=INACTIVITY_TIMEOUT_SECONDS,
        alias="INACTIVITY_TIMEOUT_SECONDS",
    )
    message_stale_seconds: float = Field(
        default=MESSAGE_STALE_SECONDS,
        alias="MESSAGE_STALE_SECONDS",
    )

    # Upload and locking limits
    max_upload_bytes: int = Field(default=MAX_UPLOAD_BYTES, alias="MAX_UPLOAD_BYTES")
    lock_timeout_seconds: float = Field(
        default=LOCK_TIMEOUT_SECONDS,
        alias="LOCK_TIMEOUT_SECONDS",
    )

    # CORS configuration for the browser client
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def connections_dir(self) -> Path:
        """Directory holding one JSON record per connected identifier."""
        return self.storage_root / "connections"

    @property
    def audio_dir(self) -> Path:
        """Directory holding one message area per pairing key."""
        return self.storage_root / "audio"


settings = Settings()
