"""Engine configuration with environment variable support."""

import os
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Platform = Literal["windows", "posix"]

_PLATFORM_ALIASES = {
    "nt": "windows",
    "win": "windows",
    "win32": "windows",
    "linux": "posix",
    "darwin": "posix",
    "mac": "posix",
    "macos": "posix",
    "unix": "posix",
}


def _default_platform() -> Platform:
    """Return the rule set matching the host operating system."""
    return "windows" if os.name == "nt" else "posix"


class Settings(BaseSettings):
    """Engine configuration loaded from environment variables.

    Loads from environment (FILESTREAM_*), .env file, or defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="FILESTREAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Validation
    max_path_length: int = Field(default=260, ge=1)
    check_reserved_names: bool = True
    target_platform: Platform = Field(default_factory=_default_platform)

    # Execution
    stop_on_error: bool = True

    # Persistence
    pipeline_file: Path = Field(default=Path("pipeline.json"), validate_default=True)

    @field_validator("target_platform", mode="before")
    @classmethod
    def parse_platform(cls, v: str) -> str:
        """Map common platform spellings onto a rule set name."""
        if isinstance(v, str):
            v = v.strip().lower()
            return _PLATFORM_ALIASES.get(v, v)
        return v

    @field_validator("pipeline_file", mode="after")
    @classmethod
    def resolve_pipeline_file(cls, v: Path) -> Path:
        """Anchor the pipeline file to an absolute path."""
        return v.expanduser().resolve()
