"""Path, filename and collision validation."""

from collections import defaultdict
from collections.abc import Iterable
from pathlib import PurePath

from pydantic import BaseModel, ConfigDict

from filestream.config import Settings
from filestream.domain.models import Change, FileEntry, ValidationErrorKind, ValidationResult
from filestream.domain.types import FileSystemPort

_CONTROL_CHARS = frozenset(chr(code) for code in range(32))

RESERVED_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{n}" for n in range(1, 10)]
    + [f"LPT{n}" for n in range(1, 10)]
)


class PlatformRules(BaseModel):
    """Characters a target platform refuses in paths and file names."""

    model_config = ConfigDict(frozen=True)

    name: str
    illegal_path_chars: frozenset[str]
    illegal_filename_chars: frozenset[str]


WINDOWS_RULES = PlatformRules(
    name="windows",
    illegal_path_chars=frozenset('<>"|?*') | _CONTROL_CHARS,
    illegal_filename_chars=frozenset('<>:"/\\|?*') | _CONTROL_CHARS,
)

POSIX_RULES = PlatformRules(
    name="posix",
    illegal_path_chars=frozenset("\0"),
    illegal_filename_chars=frozenset("/\0"),
)

PLATFORM_RULES = {rules.name: rules for rules in (WINDOWS_RULES, POSIX_RULES)}


class PathValidator:
    """Validates entries, paths, file names and batches of proposed changes.

    Pure string checks run synchronously; checks that ask the filesystem
    whether something exists are coroutines.
    """

    DEFAULT_MAX_PATH_LENGTH = 260

    def __init__(
        self,
        filesystem: FileSystemPort,
        rules: PlatformRules = WINDOWS_RULES,
        max_path_length: int = DEFAULT_MAX_PATH_LENGTH,
        check_reserved_names: bool = True,
    ):
        """Initialize the validator.

        Args:
            filesystem: Port used for existence checks
            rules: Illegal character sets of the target platform
            max_path_length: Longest accepted path, in characters
            check_reserved_names: Reject device names such as CON or LPT1
        """
        self.filesystem = filesystem
        self.rules = rules
        self.max_path_length = max_path_length
        self.check_reserved_names = check_reserved_names

    @classmethod
    def from_settings(cls, filesystem: FileSystemPort, settings: Settings) -> "PathValidator":
        """Build a validator from engine settings."""
        return cls(
            filesystem,
            rules=PLATFORM_RULES[settings.target_platform],
            max_path_length=settings.max_path_length,
            check_reserved_names=settings.check_reserved_names,
        )

    async def validate_entry(self, entry: FileEntry) -> ValidationResult:
        """Check that an entry exists and that its path is legal."""
        result = ValidationResult()

        if not await self.filesystem.exists(entry.full_path):
            result.add_error(
                f"File not found: {entry.full_path}",
                ValidationErrorKind.FILE_NOT_FOUND,
                entry.full_path,
            )

        result.merge(self.validate_path(entry.full_path))
        return result

    async def validate_entries(self, entries: Iterable[FileEntry]) -> ValidationResult:
        """Validate every entry of a batch."""
        result = ValidationResult()
        entry_list = list(entries)

        if not entry_list:
            result.add_warning("No files to validate")
            return result

        for entry in entry_list:
            result.merge(await self.validate_entry(entry))

        return result

    def validate_path(self, path: str) -> ValidationResult:
        """Check a path for emptiness, illegal characters and length."""
        result = ValidationResult()

        if not path or not path.strip():
            result.add_error("Path is null or empty", ValidationErrorKind.INVALID_PATH)
            return result

        if any(char in self.rules.illegal_path_chars for char in path):
            result.add_error(
                f"Path contains invalid characters: {path}",
                ValidationErrorKind.INVALID_CHARACTERS,
                path,
            )

        if len(path) > self.max_path_length:
            result.add_error(
                f"Path exceeds maximum length ({self.max_path_length}): {path}",
                ValidationErrorKind.PATH_TOO_LONG,
                path,
            )

        file_name = PurePath(path).name
        if file_name:
            result.merge(self.validate_filename(file_name, file_path=path))

        return result

    def validate_filename(self, file_name: str, file_path: str | None = None) -> ValidationResult:
        """Check a bare file name for illegal characters and reserved names."""
        result = ValidationResult()

        if not file_name or not file_name.strip():
            result.add_error("Filename is null or empty", ValidationErrorKind.INVALID_PATH, file_path)
            return result

        illegal = sorted({char for char in file_name if char in self.rules.illegal_filename_chars})
        if illegal:
            shown = ", ".join(repr(char) for char in illegal)
            result.add_error(
                f"Filename contains invalid characters ({shown}): {file_name}",
                ValidationErrorKind.INVALID_CHARACTERS,
                file_path,
            )

        if self.check_reserved_names and PurePath(file_name).stem.upper() in RESERVED_NAMES:
            result.add_error(
                f"Filename uses reserved name: {file_name}",
                ValidationErrorKind.INVALID_PATH,
                file_path,
            )

        return result

    async def validate_no_collisions(self, changes: Iterable[Change]) -> ValidationResult:
        """Check a batch of proposed changes for destination collisions.

        Two independent checks accumulate into one result: several changes
        sharing a destination (compared case-insensitively), and destinations
        that already exist on the filesystem.
        """
        result = ValidationResult()
        change_list = list(changes)

        if not change_list:
            return result

        by_destination: dict[str, list[Change]] = defaultdict(list)
        for change in change_list:
            by_destination[change.new_path.casefold()].append(change)

        for group in by_destination.values():
            if len(group) > 1:
                destination = group[0].new_path
                sources = ", ".join(change.original_path for change in group)
                result.add_error(
                    f"Multiple files would be written to: {destination} ({sources})",
                    ValidationErrorKind.NAME_COLLISION,
                    destination,
                )

        for change in change_list:
            # A case-only rename points at the source itself on case-insensitive filesystems
            if change.new_path.casefold() == change.original_path.casefold():
                continue
            if await self.filesystem.exists(change.new_path):
                result.add_error(
                    f"Destination already exists: {change.new_path}",
                    ValidationErrorKind.NAME_COLLISION,
                    change.new_path,
                )

        return result
