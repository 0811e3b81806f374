"""Domain models for the operation pipeline."""

from datetime import datetime
from enum import Enum
from pathlib import PurePath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExecutionMode(str, Enum):
    """How an operation or pipeline run treats the filesystem."""

    EXECUTE = "execute"  # Changes are written through the filesystem port
    PREVIEW = "preview"  # Changes are computed but never applied


class ChangeKind(str, Enum):
    """Kind of mutation a change describes."""

    NONE = "none"
    RENAME = "rename"
    MOVE = "move"
    DELETE = "delete"
    MODIFY = "modify"
    CREATE = "create"


class ValidationErrorKind(str, Enum):
    """Category of a validation error, used to render actionable messages."""

    GENERAL = "general"
    INVALID_PATH = "invalid_path"
    INVALID_CHARACTERS = "invalid_characters"
    PATH_TOO_LONG = "path_too_long"
    FILE_NOT_FOUND = "file_not_found"
    ACCESS_DENIED = "access_denied"
    FILE_IN_USE = "file_in_use"
    NAME_COLLISION = "name_collision"
    INVALID_PATTERN = "invalid_pattern"


class FileEntry(BaseModel):
    """A file or directory flowing through the pipeline.

    ``name``, ``stem``, ``extension`` and ``parent`` are derived from
    ``full_path`` on access, so a path change can never leave them stale.
    Entries are frozen: use ``with_path`` to hand a new identity to the next
    pipeline stage.
    """

    model_config = ConfigDict(frozen=True)

    full_path: str
    size: int = 0  # Bytes, 0 for directories
    created: datetime | None = None
    modified: datetime | None = None
    is_directory: bool = False
    attributes: dict[str, Any] = Field(default_factory=dict)  # Platform flags (read_only, hidden)

    @field_validator("full_path", mode="before")
    @classmethod
    def require_path(cls, v: Any) -> str:
        """Reject empty paths and accept path-like values."""
        if isinstance(v, PurePath):
            v = str(v)
        if not isinstance(v, str) or not v.strip():
            raise ValueError("full_path must be a non-empty path")
        return v

    @property
    def name(self) -> str:
        """Return the basename of the entry."""
        return PurePath(self.full_path).name

    @property
    def stem(self) -> str:
        """Return the basename without its extension."""
        return PurePath(self.full_path).stem

    @property
    def extension(self) -> str:
        """Return the extension including its leading dot, or an empty string."""
        return PurePath(self.full_path).suffix

    @property
    def parent(self) -> str:
        """Return the directory containing the entry."""
        return str(PurePath(self.full_path).parent)

    def with_path(self, new_path: str) -> "FileEntry":
        """Return a copy of this entry that lives at ``new_path``."""
        return self.model_copy(update={"full_path": str(new_path)}, deep=True)

    def clone(self) -> "FileEntry":
        """Return a full value copy of this entry."""
        return self.model_copy(deep=True)

    def __str__(self) -> str:
        """Return the full path."""
        return self.full_path


class Change(BaseModel):
    """A single proposed or applied mutation."""

    original_path: str
    new_path: str
    kind: ChangeKind
    description: str = ""
    applied: bool = False  # True only once the filesystem confirmed the change

    def __str__(self) -> str:
        """Return a short human readable form of the change."""
        if self.kind == ChangeKind.RENAME:
            return f"Rename: {PurePath(self.original_path).name} → {PurePath(self.new_path).name}"
        if self.kind == ChangeKind.MOVE:
            return f"Move: {self.original_path} → {self.new_path}"
        if self.kind == ChangeKind.DELETE:
            return f"Delete: {self.original_path}"
        if self.kind == ChangeKind.MODIFY:
            return f"Modify: {self.original_path}"
        return f"{self.kind.value.capitalize()}: {self.original_path}"


class ValidationError(BaseModel):
    """A typed validation error."""

    message: str
    kind: ValidationErrorKind = ValidationErrorKind.GENERAL
    file_path: str | None = None

    def __str__(self) -> str:
        """Return the error prefixed with its kind."""
        return f"[{self.kind.value}] {self.message}"


class ValidationResult(BaseModel):
    """Accumulator of validation errors and warnings.

    The result is valid exactly when it holds no errors.
    """

    errors: list[ValidationError] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Return True when no errors were recorded."""
        return not self.errors

    @classmethod
    def valid(cls) -> "ValidationResult":
        """Return an empty, valid result."""
        return cls()

    @classmethod
    def invalid(
        cls,
        message: str,
        kind: ValidationErrorKind = ValidationErrorKind.GENERAL,
        file_path: str | None = None,
    ) -> "ValidationResult":
        """Return a result holding a single error."""
        result = cls()
        result.add_error(message, kind, file_path)
        return result

    def add_error(
        self,
        message: str,
        kind: ValidationErrorKind = ValidationErrorKind.GENERAL,
        file_path: str | None = None,
    ) -> None:
        """Record an error, making the result invalid."""
        self.errors.append(ValidationError(message=message, kind=kind, file_path=file_path))

    def add_warning(self, message: str) -> None:
        """Record an informational warning."""
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Append the errors and warnings of ``other`` to this result."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    def errors_of(self, kind: ValidationErrorKind) -> list[ValidationError]:
        """Return the errors of the given kind."""
        return [error for error in self.errors if error.kind == kind]

    def error_summary(self) -> str:
        """Return all error messages, one per line."""
        return "\n".join(error.message for error in self.errors)


class OperationResult(BaseModel):
    """Aggregate outcome of running one operation.

    ``processed_count`` and ``failed_count`` are maintained by ``add_change``
    and ``add_error``; do not set them by hand.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool = True
    message: str = ""
    changes: list[Change] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    processed_count: int = 0
    failed_count: int = 0
    validation: ValidationResult | None = None  # Pre-flight result, kept for typed errors
    fault: Exception | None = Field(default=None, exclude=True)
    # Replacement working set for operations that synthesize entries (source)
    output_entries: list[FileEntry] | None = Field(default=None, exclude=True)

    @classmethod
    def success_result(cls, message: str = "Operation completed successfully") -> "OperationResult":
        """Return an empty successful result."""
        return cls(success=True, message=message)

    @classmethod
    def failure(cls, message: str, fault: Exception | None = None) -> "OperationResult":
        """Return a failed result, optionally carrying the fault that caused it."""
        return cls(success=False, message=message, fault=fault)

    def add_change(self, change: Change) -> None:
        """Record a change and count it as processed."""
        self.changes.append(change)
        self.processed_count += 1

    def add_error(self, error: str) -> None:
        """Record a per-entry error and count it as failed."""
        self.errors.append(error)
        self.failed_count += 1
        self.success = False

    @property
    def applied_changes(self) -> list[Change]:
        """Return the changes the filesystem confirmed."""
        return [change for change in self.changes if change.applied]


class StepResult(BaseModel):
    """Outcome of one pipeline step."""

    step_number: int  # 1-based
    operation_name: str
    result: OperationResult


class PipelineResult(BaseModel):
    """Aggregate outcome across all pipeline steps."""

    success: bool = True
    step_results: list[StepResult] = Field(default_factory=list)
    total_processed: int = 0
    total_failed: int = 0
    summary: str = ""

    def add_step_result(self, step_number: int, operation_name: str, result: OperationResult) -> None:
        """Record a step and fold its counts into the totals."""
        self.step_results.append(
            StepResult(step_number=step_number, operation_name=operation_name, result=result)
        )
        self.total_processed += result.processed_count
        self.total_failed += result.failed_count

    @property
    def changes(self) -> list[Change]:
        """Return the changes of every step in step order."""
        return [change for step in self.step_results for change in step.result.changes]
