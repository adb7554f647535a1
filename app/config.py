import logging
import sys
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App config
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]
    DEBUG: bool = False

    # Game hosting
    MAX_ROOMS: int = 1000
    DICE_SEED: int | None = None

    # WebSocket config
    WS_HEARTBEAT_INTERVAL: int = 30
    WS_CONNECTION_TIMEOUT: int = 120

    @field_validator("MAX_ROOMS")
    @classmethod
    def validate_max_rooms(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MAX_ROOMS must be at least 1")
        return v

    @field_validator("WS_HEARTBEAT_INTERVAL", "WS_CONNECTION_TIMEOUT")
    @classmethod
    def validate_positive_interval(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("WebSocket intervals must be positive")
        return v


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info("Settings loaded successfully")
    logger.debug("Max rooms: %d, dice seed: %s", settings.MAX_ROOMS, settings.DICE_SEED)
    return settings
