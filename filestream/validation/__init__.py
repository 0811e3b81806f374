"""Path and collision validation."""

from filestream.validation.validator import (
    PLATFORM_RULES,
    POSIX_RULES,
    RESERVED_NAMES,
    WINDOWS_RULES,
    PathValidator,
    PlatformRules,
)

__all__ = [
    "PathValidator",
    "PlatformRules",
    "PLATFORM_RULES",
    "WINDOWS_RULES",
    "POSIX_RULES",
    "RESERVED_NAMES",
]
