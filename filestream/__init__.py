"""Filestream SDK.

A Python library for batch file transformations: filter, rename and move
files through an ordered pipeline with validation and preview.

Quick Start (High-Level API):
    >>> from filestream import run_pipeline
    >>> run_pipeline("~/Downloads", preview=True)  # Uses the stored pipeline

Quick Start (SDK API):
    >>> import asyncio
    >>> from filestream import BatchRun, Pipeline
    >>> run = BatchRun()
    >>> pipeline = Pipeline(run.context)
    >>> rename = run.registry.create("rename")
    >>> rename.configuration = {"prefix": "IMG_", "use_sequential_numbering": True}
    >>> pipeline.add(rename)
    >>> entries = run.scan("photos")
    >>> result = asyncio.run(pipeline.preview(entries))

Configuration:
    >>> from filestream import Settings
    >>> import os
    >>> os.environ["FILESTREAM_MAX_PATH_LENGTH"] = "1024"
    >>> config = Settings()  # Loads from environment

    >>> # Or configure programmatically
    >>> config = Settings(target_platform="windows", stop_on_error=False)

Public API:
    High-level functions:
        - run_pipeline: Run the stored pipeline over a directory

    Orchestrators:
        - BatchRun: Engine wiring from settings plus validate/preview/execute

    Engine:
        - Pipeline: Ordered steps with working-set threading
        - Operation, OperationContext: Operation lifecycle
        - OperationRegistry, build_registry: Operation identifiers
        - PathValidator: Path, file name and collision rules
        - LocalFileSystem: Filesystem port over the local disk

    Configuration:
        - Settings: Configuration model

    Domain Models:
        - FileEntry, Change, ChangeKind, ExecutionMode
        - ValidationError, ValidationErrorKind, ValidationResult
        - OperationResult, StepResult, PipelineResult

    State Management:
        - PipelineStore, PipelineDocument: Pipeline persistence

    Reporters (for custom UIs):
        - Reporter: Progress reporter (use silent=True for headless mode)
"""

# Configuration
from filestream.config import Settings

# Domain models
from filestream.domain import (
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

# Engine
from filestream.filesystem import LocalFileSystem
from filestream.operations import Operation, OperationContext, OperationRegistry, build_registry

# Orchestrators
from filestream.orchestrators import BatchRun
from filestream.pipeline import Pipeline

# State management
from filestream.state.store import PipelineDocument, PipelineStore

# UI Reporters
from filestream.ui import Reporter
from filestream.validation import PathValidator

__all__ = [
    # High-level functions
    "run_pipeline",
    # Orchestrators
    "BatchRun",
    # Engine
    "Pipeline",
    "Operation",
    "OperationContext",
    "OperationRegistry",
    "build_registry",
    "PathValidator",
    "LocalFileSystem",
    # Configuration
    "Settings",
    # Domain models
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
    # State management
    "PipelineStore",
    "PipelineDocument",
    # Reporters
    "Reporter",
]

# Version
__version__ = "0.1.0"


def run_pipeline(
    directory: str,
    config: Settings | None = None,
    reporter: Reporter | None = None,
    recursive: bool = False,
    preview: bool = False,
) -> PipelineResult:
    """Run the stored pipeline over a directory (high-level convenience function).

    Args:
        directory: Directory whose files form the initial working set
        config: Engine configuration. If None, uses Settings() from environment.
        reporter: Progress reporter. If None, uses Reporter().
        recursive: Include files in subdirectories.
        preview: Compute the changes without applying them.

    Returns:
        Per-step results and the run summary

    Example:
        >>> from filestream import run_pipeline, Settings
        >>> config = Settings(pipeline_file="organize.json")
        >>> result = run_pipeline("inbox", config=config, preview=True)
        >>> print(result.summary)
    """
    run = BatchRun(config)
    if preview:
        return run.preview(directory, recursive, reporter)
    return run.execute(directory, recursive, reporter)
