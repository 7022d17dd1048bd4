"""
Trainer client configuration.
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Recognition settings
CONFIDENCE_THRESHOLD = 50.0  # percent; predictions at or below it are not looked up
PLACEHOLDER_LABEL = "---"
HIGH_CONFIDENCE = 80.0
MEDIUM_CONFIDENCE = 60.0

# Camera settings
TARGET_FPS = 15
FRAME_WIDTH = 400
FRAME_HEIGHT = 300

# Classifier settings
KNN_K = 3

IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.bmp', '.webp')


class ClientSettings(BaseSettings):
    """Client settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_prefix="SIGNTALK_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_url: str = "http://localhost:3000"
    request_timeout: float = 10.0

    confidence_threshold: float = CONFIDENCE_THRESHOLD
    target_fps: float = Field(default=TARGET_FPS, gt=0)
    camera_index: int = 0
    knn_k: int = Field(default=KNN_K, ge=1)

    extractor: str = "mobilenet"  # "mobilenet" or "landmarks"
    hand_landmarker_path: Optional[Path] = None

    log_level: str = "INFO"
    logging_json: bool = False


@lru_cache()
def get_client_settings() -> ClientSettings:
    """Return cached client settings instance."""
    return ClientSettings()
