"""
Core application configuration and constants.
"""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Base paths
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
DATA_DIR = PROJECT_ROOT / "data"

# Storage defaults
DEFAULT_DATABASE_PATH = DATA_DIR / "signtalk.db"
DEFAULT_SNAPSHOT_PATH = DATA_DIR / "modelo-ia.json"

# API settings
API_PREFIX = "/api"
MAX_BODY_BYTES = 50 * 1024 * 1024  # classifier snapshots can be large

# Seed vocabulary, inserted once when the table is empty
ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
ALPHABET_CATEGORY = "Alfabeto"
SEED_WORDS = [
    ("OLA", "Saudacao", "/gestos/ola.gif"),
    ("BEM", "Estado", "/gestos/bem.gif"),
    ("MAL", "Estado", "/gestos/mal.gif"),
]


def seed_vocabulary() -> List[tuple]:
    """Return (key, category, media_url) rows for the initial vocabulary."""
    letters = [(letter, ALPHABET_CATEGORY, f"/gestos/{letter}.gif") for letter in ALPHABET]
    return letters + list(SEED_WORDS)


class Settings(BaseSettings):
    """Backend settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_prefix="SIGNTALK_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    app_name: str = "SignTalk API"
    database_dsn: str = Field(default=f"sqlite+aiosqlite:///{DEFAULT_DATABASE_PATH}")
    snapshot_path: Path = Field(default=DEFAULT_SNAPSHOT_PATH)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    max_body_bytes: int = MAX_BODY_BYTES

    host: str = "0.0.0.0"
    port: int = 3000

    logging_json: bool = False
    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
