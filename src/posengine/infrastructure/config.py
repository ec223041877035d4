"""Register configuration loaded from the environment.

Variables use the ``POS_`` prefix, e.g. ``POS_BACKEND=local`` or
``POS_API_BASE_URL=https://books.example.com``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Default data directory for the local backend, relative to the project root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_prefix="POS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Backend
    backend: Literal["http", "local"] = "local"
    api_base_url: str = "http://localhost:3000"
    api_token: Optional[str] = None
    timeout_seconds: float = 15.0
    data_dir: Path = _DEFAULT_DATA_DIR

    # Logging
    log_level: str = "WARNING"

    # Receipts: 32 columns for 58mm paper, 42 for 80mm
    receipt_width: int = 42
    receipt_copies: int = 1

    # Peripherals
    cash_drawer_device: Optional[Path] = None

    @field_validator("receipt_width")
    @classmethod
    def _paper_width(cls, value: int) -> int:
        if value not in (32, 42):
            raise ValueError("receipt_width must be 32 (58mm) or 42 (80mm)")
        return value

    @field_validator("receipt_copies")
    @classmethod
    def _at_least_one_copy(cls, value: int) -> int:
        return max(1, value)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
