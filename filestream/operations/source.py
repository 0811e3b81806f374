"""Source operation: load files from a folder into the working set."""

from fnmatch import fnmatch

from pydantic import BaseModel, ConfigDict

from filestream.domain.models import (
    Change,
    ChangeKind,
    ExecutionMode,
    FileEntry,
    OperationResult,
    ValidationResult,
)
from filestream.domain.types import CancellationSignal, is_cancelled
from filestream.operations.base import Operation, mark_cancelled


class SourceConfiguration(BaseModel):
    """Where to load files from and how to combine them with the stream."""

    model_config = ConfigDict(extra="forbid")

    source_directory: str = ""
    include_subdirectories: bool = False
    merge_with_existing: bool = True  # False replaces the incoming working set
    file_pattern: str = "*"  # Shell-style pattern matched against file names


class SourceOperation(Operation):
    """Load files from a directory, as a first step or merged in later.

    Reads through the filesystem port only, so preview and execute behave the
    same. The resulting working set is handed to the pipeline explicitly via
    ``OperationResult.output_entries``.
    """

    operation_id = "source"
    display_name = "Load Files"
    description = "Load files from a folder into the pipeline"
    configuration_model = SourceConfiguration
    requires_entries = False

    def validate_configuration(self) -> ValidationResult:
        """Check that a source directory is configured."""
        result = ValidationResult()
        if not self.configuration.source_directory.strip():
            result.add_error("Source directory is required")
        return result

    async def load_entries(self) -> list[FileEntry]:
        """List the files of the source directory that match the pattern."""
        config = self.configuration
        pattern = config.file_pattern.strip()
        if pattern in ("", "*.*"):
            pattern = "*"

        listed = await self.context.filesystem.list_entries(
            config.source_directory, config.include_subdirectories
        )
        return [
            entry
            for entry in listed
            if not entry.is_directory and fnmatch(entry.name.casefold(), pattern.casefold())
        ]

    async def _validate_specific(
        self,
        entries: list[FileEntry],
        cancellation: CancellationSignal | None,
    ) -> ValidationResult:
        result = self.validate_configuration()
        if not result.is_valid:
            return result

        source = self.configuration.source_directory
        if not await self.context.filesystem.exists(source):
            result.add_error(f"Source directory does not exist: {source}")
        return result

    async def _execute_specific(
        self,
        entries: list[FileEntry],
        cancellation: CancellationSignal | None,
        mode: ExecutionMode,
    ) -> OperationResult:
        merge = self.configuration.merge_with_existing
        loaded = await self.load_entries()
        result = OperationResult()

        for index, entry in enumerate(loaded):
            if is_cancelled(cancellation):
                mark_cancelled(result, index, len(loaded))
                return result
            result.add_change(
                Change(
                    original_path=entry.full_path,
                    new_path=entry.full_path,
                    kind=ChangeKind.NONE,
                    description="Added to stream" if merge else "Loaded from source",
                    applied=True,
                )
            )

        if not merge:
            result.output_entries = loaded
            result.message = f"Loaded {len(loaded)} files from source"
            return result

        loaded_paths = {entry.full_path.casefold() for entry in loaded}
        for entry in entries:
            if entry.full_path.casefold() in loaded_paths:
                continue
            result.add_change(
                Change(
                    original_path=entry.full_path,
                    new_path=entry.full_path,
                    kind=ChangeKind.NONE,
                    description="Kept from stream",
                    applied=True,
                )
            )

        existing = {entry.full_path.casefold() for entry in entries}

        result.output_entries = list(entries) + [
            entry for entry in loaded if entry.full_path.casefold() not in existing
        ]
        result.message = f"Merged {len(loaded)} files with {len(entries)} existing files"
        return result
