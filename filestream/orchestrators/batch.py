"""Batch run orchestrator.

Wires the engine from settings and runs a stored pipeline over a directory.
"""

import asyncio
from pathlib import Path

from filestream.config import Settings
from filestream.domain.models import FileEntry, PipelineResult, ValidationResult
from filestream.filesystem.local import LocalFileSystem
from filestream.operations.base import OperationContext
from filestream.operations.registry import build_registry
from filestream.pipeline import Pipeline
from filestream.state.store import PipelineStore
from filestream.ui import Reporter
from filestream.validation.validator import PathValidator


class BatchRun:
    """Orchestrates a batch run of the stored pipeline.

    The workflow is:
    1. Load the pipeline definition from the pipeline file
    2. Scan the target directory into file entries
    3. Validate, preview or execute the pipeline over those entries
    4. Report the outcome
    """

    def __init__(self, config: Settings | None = None):
        """Initialize the batch run.

        Args:
            config: Engine configuration. If None, creates new Settings() from environment.
        """
        self.config = config if config is not None else Settings()
        self.filesystem = LocalFileSystem()
        self.validator = PathValidator.from_settings(self.filesystem, self.config)
        self.context = OperationContext(
            filesystem=self.filesystem,
            validator=self.validator,
            stop_on_error=self.config.stop_on_error,
        )
        self.registry = build_registry(self.context)

    def load_pipeline(self, path: str | Path | None = None) -> Pipeline:
        """Build the stored pipeline.

        Args:
            path: Pipeline file. Defaults to the configured pipeline file.
        """
        with PipelineStore(path or self.config.pipeline_file) as store:
            return store.data.build(self.registry, self.context)

    def scan(self, directory: str | Path, recursive: bool = False) -> list[FileEntry]:
        """List the files of a directory as entries.

        Raises:
            FileNotFoundError: If the directory does not exist
        """
        return asyncio.run(self._scan(str(directory), recursive))

    def validate(
        self,
        directory: str | Path,
        recursive: bool = False,
        reporter: Reporter | None = None,
        stop_on_error: bool | None = None,
    ) -> ValidationResult:
        """Validate the stored pipeline against the files of a directory."""
        if reporter is None:
            reporter = Reporter()

        pipeline = self.load_pipeline()
        entries = self._scan_and_report(directory, recursive, reporter)
        validation = asyncio.run(pipeline.validate(entries, stop_on_error=stop_on_error))
        reporter.report_validation(validation)
        return validation

    def preview(
        self,
        directory: str | Path,
        recursive: bool = False,
        reporter: Reporter | None = None,
        stop_on_error: bool | None = None,
    ) -> PipelineResult:
        """Compute the changes of the stored pipeline without applying them."""
        return self._run(directory, recursive, reporter, stop_on_error, preview=True)

    def execute(
        self,
        directory: str | Path,
        recursive: bool = False,
        reporter: Reporter | None = None,
        stop_on_error: bool | None = None,
    ) -> PipelineResult:
        """Run the stored pipeline and apply its changes."""
        return self._run(directory, recursive, reporter, stop_on_error, preview=False)

    def _run(
        self,
        directory: str | Path,
        recursive: bool,
        reporter: Reporter | None,
        stop_on_error: bool | None,
        preview: bool,
    ) -> PipelineResult:
        if reporter is None:
            reporter = Reporter()

        pipeline = self.load_pipeline()
        entries = self._scan_and_report(directory, recursive, reporter)

        with reporter.pipeline_context():
            progress_hook = reporter.create_step_progress_hook()
            run = pipeline.preview if preview else pipeline.execute
            result = asyncio.run(
                run(entries, stop_on_error=stop_on_error, progress_hook=progress_hook)
            )

        reporter.report_pipeline_result(result, preview=preview)
        return result

    def _scan_and_report(
        self,
        directory: str | Path,
        recursive: bool,
        reporter: Reporter,
    ) -> list[FileEntry]:
        entries = self.scan(directory, recursive)
        reporter.report_scan(str(directory), len(entries))
        if not entries:
            reporter.report_warning(f"No files found in {directory}")
        return entries

    async def _scan(self, directory: str, recursive: bool) -> list[FileEntry]:
        if not await self.filesystem.exists(directory):
            raise FileNotFoundError(f"Directory not found: {directory}")
        entries = await self.filesystem.list_entries(directory, recursive)
        return [entry for entry in entries if not entry.is_directory]
