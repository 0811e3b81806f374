"""Reporter for pipeline output and progress tracking."""

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn

from filestream.domain.models import ChangeKind, PipelineResult, ValidationResult
from filestream.domain.types import StepProgressHook
from filestream.ui.tables import (
    create_change_table,
    create_step_table,
    create_validation_table,
    format_change_summary,
)


class Reporter:
    """Pipeline reporter with rich progress bars and formatted output."""

    CHANGE_PREVIEW_LIMIT = 20

    def __init__(self, silent: bool = False) -> None:
        """Initialize reporter.

        Args:
            silent: If True, suppress all output (for testing/automation).
        """
        self.silent = silent
        self.console = Console(quiet=silent)
        self._progress: Progress | None = None
        self._task_id: int | None = None

    def report_scan(self, directory: str, count: int) -> None:
        """Report how many entries a directory scan found."""
        if not self.silent:
            self.console.print(f"Found {count} files in {directory}")

    def report_validation(self, validation: ValidationResult) -> None:
        """Report the outcome of a pre-flight validation."""
        if self.silent:
            return

        if validation.errors or validation.warnings:
            self.console.print(create_validation_table(validation))

        if validation.is_valid:
            self.console.print("\n[green]Validation passed[/green]")
        else:
            self.console.print(
                f"\n[red]Validation failed with {len(validation.errors)} error(s)[/red]"
            )

    def report_pipeline_result(self, result: PipelineResult, preview: bool = False) -> None:
        """Report per-step results, a sample of the changes and the summary."""
        if self.silent:
            return

        if result.step_results:
            self.console.print(create_step_table(result))

        changes = [change for change in result.changes if change.kind != ChangeKind.NONE]
        if changes:
            shown = changes[: self.CHANGE_PREVIEW_LIMIT]
            remaining = len(changes) - len(shown)
            suffix = f" - showing {len(shown)}" if remaining > 0 else ""
            if preview:
                suffix += " [preview]"
            self.console.print(create_change_table(shown, title_suffix=suffix))
            self.console.print(f"[bold]Changes:[/bold] {format_change_summary(changes)}")

        for step in result.step_results:
            for error in step.result.errors:
                self.console.print(f"  [red]✗[/red] Step {step.step_number}: {error}")

        color = "green" if result.success else "red"
        self.console.print(f"\n[{color}]{result.summary}[/{color}]")

    def report_warning(self, message: str) -> None:
        """Report a warning message."""
        if not self.silent:
            self.console.print(f"\n[yellow]Warning:[/yellow] {escape(message)}")

    def report_error(self, message: str) -> None:
        """Report an error message."""
        if not self.silent:
            self.console.print(f"\n[red]Error:[/red] {escape(message)}")

    def create_step_progress_hook(self) -> StepProgressHook:
        """Create a progress hook advancing one bar per pipeline step."""
        if self.silent:

            def hook(step_number: int, total_steps: int, display_name: str) -> None:
                pass

            return hook

        if self._progress is None:
            raise RuntimeError("Must be called within pipeline_context")

        def hook(step_number: int, total_steps: int, display_name: str) -> None:
            if self._progress is None:
                return

            if self._task_id is None:
                self._task_id = self._progress.add_task("", total=total_steps)
            self._progress.update(
                self._task_id,
                completed=step_number - 1,
                description=f"Step {step_number}/{total_steps}: {display_name}",
            )

        return hook

    def pipeline_context(self):
        """Context manager for step progress display."""
        if self.silent:

            class NoOpContext:
                def __enter__(self):
                    return self

                def __exit__(self, *args):
                    pass

            return NoOpContext()

        class PipelineContext:
            def __init__(ctx_self, reporter):
                ctx_self.reporter = reporter

            def __enter__(ctx_self):
                ctx_self.reporter._progress = Progress(
                    TextColumn("{task.description}"),
                    BarColumn(),
                    TextColumn("{task.completed}/{task.total} steps"),
                    TimeElapsedColumn(),
                    console=ctx_self.reporter.console,
                    transient=True,
                )
                ctx_self.reporter._progress.__enter__()
                return ctx_self.reporter._progress

            def __exit__(ctx_self, *args):
                if ctx_self.reporter._progress:
                    if ctx_self.reporter._task_id is not None:
                        task = ctx_self.reporter._progress.tasks[ctx_self.reporter._task_id]
                        ctx_self.reporter._progress.update(
                            ctx_self.reporter._task_id, completed=task.total
                        )
                    ctx_self.reporter._progress.__exit__(*args)
                    ctx_self.reporter._progress = None
                    ctx_self.reporter._task_id = None

        return PipelineContext(self)
