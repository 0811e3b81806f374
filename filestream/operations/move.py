"""Move operation: file entries into a destination tree by folder, extension and date."""

import re
from datetime import datetime
from logging import Logger
from pathlib import PurePath

from pydantic import BaseModel, ConfigDict

from filestream.domain.models import (
    Change,
    ChangeKind,
    ExecutionMode,
    FileEntry,
    OperationResult,
    ValidationResult,
)
from filestream.domain.types import CancellationSignal
from filestream.operations.base import Operation

logger = Logger(__file__)

# yyyy-MM style date tokens, longest first so MM wins over M
_DATE_TOKENS = {
    "yyyy": lambda moment: f"{moment.year:04d}",
    "yy": lambda moment: f"{moment.year % 100:02d}",
    "MMMM": lambda moment: moment.strftime("%B"),
    "MMM": lambda moment: moment.strftime("%b"),
    "MM": lambda moment: f"{moment.month:02d}",
    "M": lambda moment: str(moment.month),
    "dd": lambda moment: f"{moment.day:02d}",
    "d": lambda moment: str(moment.day),
    "HH": lambda moment: f"{moment.hour:02d}",
    "H": lambda moment: str(moment.hour),
    "mm": lambda moment: f"{moment.minute:02d}",
    "m": lambda moment: str(moment.minute),
    "ss": lambda moment: f"{moment.second:02d}",
    "s": lambda moment: str(moment.second),
}
_DATE_TOKEN_PATTERN = re.compile("|".join(_DATE_TOKENS))


def format_date(moment: datetime, date_format: str) -> str:
    """Format ``moment`` with a ``yyyy/MM/dd`` style pattern.

    Single letter tokens (``M``, ``d``, ``H``, ``m``, ``s``) are not zero
    padded. Patterns containing ``%`` are treated as strftime formats.
    """
    if "%" in date_format:
        return moment.strftime(date_format)
    return _DATE_TOKEN_PATTERN.sub(lambda match: _DATE_TOKENS[match.group(0)](moment), date_format)


class MoveConfiguration(BaseModel):
    """Parameters of a move."""

    model_config = ConfigDict(extra="forbid")

    destination_directory: str = ""
    organize_by_extension: bool = False
    organize_by_date: bool = False
    date_format: str = "yyyy-MM"  # yyyy, MM, M, dd, d style tokens or strftime directives
    preserve_folder_structure: bool = False  # Keep the immediate parent folder name


class MoveOperation(Operation):
    """Move entries below a destination directory.

    The subdirectory of each entry is built from, in order, its parent folder
    name, its extension and its formatted modified date, each optional.
    Directories are created on demand during execution.
    """

    operation_id = "move"
    display_name = "Move Files"
    description = "Move files to different locations based on rules"
    configuration_model = MoveConfiguration

    def validate_configuration(self) -> ValidationResult:
        """Check that a legal destination directory is configured."""
        config = self.configuration
        result = ValidationResult()

        if not config.destination_directory.strip():
            result.add_error("Destination directory is required")
            return result

        result.merge(self.context.validator.validate_path(config.destination_directory))

        if config.organize_by_date and not config.date_format.strip():
            result.add_error("Date format is required when organizing by date")

        return result

    def subdirectory_parts(self, entry: FileEntry) -> list[str]:
        """Return the path segments placed between the destination and the name."""
        config = self.configuration
        parts = []

        if config.preserve_folder_structure:
            parent_name = PurePath(entry.full_path).parent.name
            if parent_name:
                parts.append(parent_name)

        if config.organize_by_extension and entry.extension:
            parts.append(entry.extension.lstrip("."))

        if config.organize_by_date and entry.modified is not None:
            parts.append(format_date(entry.modified, config.date_format))

        return parts

    def generate_changes(self, entries: list[FileEntry]) -> list[Change]:
        """Compute the move change of every entry, in input order."""
        destination = self.configuration.destination_directory
        changes = []

        for entry in entries:
            parts = self.subdirectory_parts(entry)
            target = str(PurePath(*parts)) if parts else destination
            changes.append(
                Change(
                    original_path=entry.full_path,
                    new_path=str(PurePath(destination, *parts, entry.name)),
                    kind=ChangeKind.MOVE,
                    description=f"Move to {target}",
                )
            )

        return changes

    async def _validate_specific(
        self,
        entries: list[FileEntry],
        cancellation: CancellationSignal | None,
    ) -> ValidationResult:
        result = self.validate_configuration()
        if not result.is_valid:
            return result

        destination = self.configuration.destination_directory
        if not await self.context.filesystem.exists(destination):
            result.add_warning(f"Destination directory will be created: {destination}")

        changes = self.generate_changes(entries)
        result.merge(await self.context.validator.validate_no_collisions(changes))
        return result

    async def _execute_specific(
        self,
        entries: list[FileEntry],
        cancellation: CancellationSignal | None,
        mode: ExecutionMode,
    ) -> OperationResult:
        filesystem = self.context.filesystem
        destination = self.configuration.destination_directory
        changes = self.generate_changes(entries)

        if mode == ExecutionMode.EXECUTE and not await filesystem.exists(destination):
            if not await filesystem.create_directory(destination):
                result = OperationResult()
                result.add_error(f"Could not create destination directory: {destination}")
                return result

        async def move(change: Change) -> bool:
            target_directory = str(PurePath(change.new_path).parent)
            if not await filesystem.exists(target_directory):
                if not await filesystem.create_directory(target_directory):
                    logger.warning(f"Could not create directory {target_directory}")
                    return False
            return await filesystem.move(change.original_path, change.new_path)

        return await self._apply_changes(changes, move, "move", cancellation, mode)
