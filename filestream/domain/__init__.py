"""Domain models and shared types."""

from filestream.domain.models import (
    Change,
    ChangeKind,
    ExecutionMode,
    FileEntry,
    OperationResult,
    PipelineResult,
    StepResult,
    ValidationError,
    ValidationErrorKind,
    ValidationResult,
)
from filestream.domain.types import (
    CancellationSignal,
    FileSystemPort,
    StepProgressHook,
    is_cancelled,
)

__all__ = [
    "FileEntry",
    "Change",
    "ChangeKind",
    "ExecutionMode",
    "ValidationError",
    "ValidationErrorKind",
    "ValidationResult",
    "OperationResult",
    "StepResult",
    "PipelineResult",
    "CancellationSignal",
    "FileSystemPort",
    "StepProgressHook",
    "is_cancelled",
]
