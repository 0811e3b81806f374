"""Filter operation: narrow the working set by name, extension, size and date."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from filestream.domain.models import (
    Change,
    ChangeKind,
    ExecutionMode,
    FileEntry,
    OperationResult,
    ValidationErrorKind,
    ValidationResult,
)
from filestream.domain.types import CancellationSignal, is_cancelled
from filestream.operations.base import Operation, mark_cancelled


class FilterConfiguration(BaseModel):
    """Criteria an entry must meet to stay in the working set.

    Every criterion that is set must hold; unset criteria always hold.
    """

    model_config = ConfigDict(extra="forbid")

    name_pattern: str = ""  # Case-insensitive substring, or regex when use_regex
    use_regex: bool = False
    extensions: list[str] = Field(default_factory=list)
    min_size: int | None = None
    max_size: int | None = None
    min_date: datetime | None = None  # Compared with the modified timestamp
    max_date: datetime | None = None
    include_directories: bool = True

    @field_validator("min_date", "max_date", mode="after")
    @classmethod
    def to_naive_local(cls, v: datetime | None) -> datetime | None:
        """Convert aware bounds to naive local time, like entry timestamps."""
        if v is not None and v.tzinfo is not None:
            return v.astimezone().replace(tzinfo=None)
        return v

    @field_validator("extensions", mode="before")
    @classmethod
    def split_extensions(cls, v):
        """Accept a comma separated string such as ``"pdf,txt"``."""
        if isinstance(v, str):
            return v.split(",")
        return v

    @field_validator("extensions", mode="after")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Give every extension a leading dot and drop blanks."""
        normalized = []
        for extension in v:
            extension = extension.strip()
            if not extension or extension == ".":
                continue
            normalized.append(extension if extension.startswith(".") else f".{extension}")
        return normalized


class FilterOperation(Operation):
    """Select the entries matching a set of criteria.

    The filesystem is never touched. Matching entries get an applied MODIFY
    change, which is what keeps them in the pipeline's working set; entries
    without a change drop out.
    """

    operation_id = "filter"
    display_name = "Filter Files"
    description = "Filter files based on name, extension, size, or date"
    configuration_model = FilterConfiguration

    def validate_configuration(self) -> ValidationResult:
        """Check the regex and the size and date ranges."""
        config = self.configuration
        result = ValidationResult()

        if config.use_regex and config.name_pattern:
            try:
                re.compile(config.name_pattern)
            except re.error as e:
                result.add_error(
                    f"Invalid regex pattern: {config.name_pattern} ({e})",
                    ValidationErrorKind.INVALID_PATTERN,
                )

        if config.min_size is not None and config.max_size is not None:
            if config.min_size > config.max_size:
                result.add_error("Minimum size cannot be greater than maximum size")

        if config.min_date is not None and config.max_date is not None:
            if config.min_date > config.max_date:
                result.add_error("Minimum date cannot be later than maximum date")

        return result

    def matches(self, entry: FileEntry) -> bool:
        """Return True when the entry meets every configured criterion."""
        config = self.configuration

        if not config.include_directories and entry.is_directory:
            return False

        if config.name_pattern:
            if config.use_regex:
                if not re.search(config.name_pattern, entry.name, re.IGNORECASE):
                    return False
            elif config.name_pattern.casefold() not in entry.name.casefold():
                return False

        if config.extensions:
            wanted = {extension.casefold() for extension in config.extensions}
            if entry.extension.casefold() not in wanted:
                return False

        if config.min_size is not None and entry.size < config.min_size:
            return False
        if config.max_size is not None and entry.size > config.max_size:
            return False

        if config.min_date is not None or config.max_date is not None:
            if entry.modified is None:
                return False
            if config.min_date is not None and entry.modified < config.min_date:
                return False
            if config.max_date is not None and entry.modified > config.max_date:
                return False

        return True

    async def _validate_specific(
        self,
        entries: list[FileEntry],
        cancellation: CancellationSignal | None,
    ) -> ValidationResult:
        return self.validate_configuration()

    async def _execute_specific(
        self,
        entries: list[FileEntry],
        cancellation: CancellationSignal | None,
        mode: ExecutionMode,
    ) -> OperationResult:
        # Identical in both modes: filtering never mutates anything
        result = OperationResult()
        matched = 0

        for index, entry in enumerate(entries):
            if is_cancelled(cancellation):
                mark_cancelled(result, index, len(entries))
                return result

            if self.matches(entry):
                matched += 1
                result.add_change(
                    Change(
                        original_path=entry.full_path,
                        new_path=entry.full_path,
                        kind=ChangeKind.MODIFY,
                        description="Matched filter criteria",
                        applied=True,
                    )
                )

        result.message = f"Filtered {len(entries)} files to {matched} matches"
        return result
