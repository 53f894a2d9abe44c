"""
Build configuration
"""
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BuildSettings(BaseSettings):
    """Settings read from CFORGE_* environment variables or .env"""

    model_config = SettingsConfigDict(
        env_prefix="CFORGE_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Layout root (src/ obj/ bin/ live directly under it)
    BUILD_ROOT: str = "."

    # Output
    OUTPUT_NAME: str = "program"
    DIR_MODE: int = 0o755
    RECEIPT_PATH: Optional[str] = None

    # Behavior
    RUN: bool = False
    STRICT_EXIT: bool = False  # nonzero exit when a stage fails

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept level names in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v
