"""Table rendering utilities for CLI output."""

from collections import Counter

from rich.table import Table

from filestream.domain.models import Change, ChangeKind, PipelineResult, ValidationResult
from filestream.operations.registry import OperationRegistry

KIND_COLORS = {
    ChangeKind.NONE: "dim",
    ChangeKind.RENAME: "cyan",
    ChangeKind.MOVE: "blue",
    ChangeKind.DELETE: "red",
    ChangeKind.MODIFY: "yellow",
    ChangeKind.CREATE: "green",
}


def create_step_table(result: PipelineResult) -> Table:
    """Create a table with one row per pipeline step.

    Args:
        result: Pipeline result to render

    Returns:
        Rich Table object ready for display
    """
    table = Table(title=f"Pipeline Steps ({len(result.step_results)} run)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Operation", style="cyan")
    table.add_column("Status")
    table.add_column("Processed", justify="right")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Message", style="white")

    for step in result.step_results:
        status = "[green]ok[/green]" if step.result.success else "[red]failed[/red]"
        table.add_row(
            str(step.step_number),
            step.operation_name,
            status,
            str(step.result.processed_count),
            str(step.result.failed_count) if step.result.failed_count else "-",
            step.result.message,
        )

    # Totals row only adds information when more than one step ran
    if len(result.step_results) > 1:
        table.add_section()
        table.add_row(
            "",
            "[bold]TOTAL[/bold]",
            "",
            f"[bold]{result.total_processed}[/bold]",
            f"[bold]{result.total_failed}[/bold]" if result.total_failed else "-",
            "",
        )

    return table


def create_change_table(changes: list[Change], title_suffix: str = "") -> Table:
    """Create a table listing changes.

    Args:
        changes: Changes to display
        title_suffix: Optional suffix for table title

    Returns:
        Rich Table object ready for display
    """
    table = Table(title=f"Changes ({len(changes)} total){title_suffix}")
    table.add_column("Kind")
    table.add_column("Original", style="white")
    table.add_column("New", style="white")
    table.add_column("Description", style="dim")
    table.add_column("Applied", justify="center")

    for change in changes:
        color = KIND_COLORS.get(change.kind, "white")
        table.add_row(
            f"[{color}]{change.kind.value}[/{color}]",
            change.original_path,
            change.new_path if change.new_path != change.original_path else "-",
            change.description,
            "[green]✓[/green]" if change.applied else "[dim]-[/dim]",
        )

    return table


def create_validation_table(validation: ValidationResult) -> Table:
    """Create a table listing validation errors and warnings."""
    table = Table(title="Validation")
    table.add_column("Level")
    table.add_column("Kind", style="cyan")
    table.add_column("Message", style="white")
    table.add_column("File", style="dim")

    for error in validation.errors:
        table.add_row("[red]error[/red]", error.kind.value, error.message, error.file_path or "-")
    for warning in validation.warnings:
        table.add_row("[yellow]warning[/yellow]", "-", warning, "-")

    return table


def create_operations_table(registry: OperationRegistry) -> Table:
    """Create a table of the registered operations."""
    table = Table(title="Operations")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Description", style="dim")

    for operation_id in registry.registered():
        operation = registry.create(operation_id)
        table.add_row(operation_id, operation.display_name, operation.description)

    return table


def format_change_summary(changes: list[Change]) -> str:
    """Create a summary string of change counts by kind.

    Args:
        changes: Changes to count

    Returns:
        Formatted summary string like "2 move, 3 rename"
    """
    kind_counts = Counter(change.kind.value for change in changes)
    return ", ".join(f"{count} {kind}" for kind, count in sorted(kind_counts.items()))
