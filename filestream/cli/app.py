"""Typer-based CLI for batch file transformations."""

import orjson
import typer
from rich.table import Table

from filestream.config import Settings
from filestream.orchestrators import BatchRun
from filestream.state.store import PipelineStore
from filestream.ui import Reporter
from filestream.ui.tables import create_operations_table

app = typer.Typer(help="Batch file transformation pipeline")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Show help when no subcommand is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def parse_assignments(assignments: list[str]) -> dict:
    """Parse ``key=value`` pairs; values are JSON when they parse as JSON.

    Raises:
        typer.BadParameter: If an assignment has no ``=``
    """
    configuration = {}
    for assignment in assignments:
        key, separator, raw = assignment.partition("=")
        if not separator or not key.strip():
            raise typer.BadParameter(f"Expected key=value, got {assignment!r}")
        try:
            value = orjson.loads(raw)
        except orjson.JSONDecodeError:
            value = raw
        configuration[key.strip()] = value
    return configuration


@app.command()
def operations():
    """List the available operations."""
    reporter = Reporter()
    run = BatchRun(Settings())
    reporter.console.print(create_operations_table(run.registry))


@app.command()
def add(
    operation_id: str = typer.Argument(..., help="Operation to append, e.g. filter or rename"),
    assignments: list[str] = typer.Option(
        None, "--set", "-s", help="Configuration value as key=value (repeatable)"
    ),
):
    """Append a step to the stored pipeline."""
    config = Settings()
    reporter = Reporter()
    run = BatchRun(config)

    try:
        operation = run.registry.create(operation_id)
        operation.configuration = parse_assignments(assignments or [])
    except ValueError as e:
        reporter.report_error(str(e))
        raise typer.Exit(1)

    for error in operation.validate_configuration().errors:
        reporter.report_warning(error.message)

    with PipelineStore(config.pipeline_file) as store:
        store.add_step(operation.operation_id, operation.configuration.model_dump(mode="json"))
        step_count = len(store.steps)

    reporter.console.print(f"Added step {step_count}: {operation.describe()}")


@app.command()
def show(json_output: bool = typer.Option(False, "--json", help="Output as JSON")):
    """Show the steps of the stored pipeline."""
    config = Settings()
    reporter = Reporter()

    if json_output:
        with PipelineStore(config.pipeline_file) as store:
            payload = orjson.dumps(store.data.model_dump(mode="json"), option=orjson.OPT_INDENT_2)
            typer.echo(payload.decode())
        return

    try:
        pipeline = BatchRun(config).load_pipeline()
    except ValueError as e:
        reporter.report_error(str(e))
        raise typer.Exit(1)

    if not len(pipeline):
        reporter.console.print("[dim]Pipeline is empty[/dim]")
        return

    table = Table(title=f"Pipeline ({len(pipeline)} steps)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Operation", style="cyan")
    table.add_column("Details", style="white")
    for number, operation in enumerate(pipeline, start=1):
        table.add_row(str(number), operation.operation_id, operation.describe())
    reporter.console.print(table)


@app.command()
def clear():
    """Remove every step from the stored pipeline."""
    config = Settings()
    reporter = Reporter()

    with PipelineStore(config.pipeline_file) as store:
        removed = len(store.steps)
        store.clear()

    reporter.console.print(f"Removed {removed} steps")


@app.command()
def validate(
    directory: str = typer.Argument(..., help="Directory to run the pipeline over"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Include subdirectories"),
):
    """Validate the stored pipeline against a directory."""
    reporter = Reporter()
    try:
        validation = BatchRun(Settings()).validate(directory, recursive, reporter)
    except (FileNotFoundError, ValueError) as e:
        reporter.report_error(str(e))
        raise typer.Exit(1)

    if not validation.is_valid:
        raise typer.Exit(1)


@app.command()
def preview(
    directory: str = typer.Argument(..., help="Directory to run the pipeline over"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Include subdirectories"),
):
    """Show what the stored pipeline would change, without changing anything."""
    reporter = Reporter()
    try:
        result = BatchRun(Settings()).preview(directory, recursive, reporter)
    except (FileNotFoundError, ValueError) as e:
        reporter.report_error(str(e))
        raise typer.Exit(1)

    if not result.success:
        raise typer.Exit(1)


@app.command()
def run(
    directory: str = typer.Argument(..., help="Directory to run the pipeline over"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Include subdirectories"),
    keep_going: bool = typer.Option(
        False, "--keep-going", help="Continue with later steps after a failed step"
    ),
):
    """Run the stored pipeline and apply its changes."""
    reporter = Reporter()
    try:
        result = BatchRun(Settings()).execute(
            directory,
            recursive,
            reporter,
            stop_on_error=False if keep_going else None,
        )
    except (FileNotFoundError, ValueError) as e:
        reporter.report_error(str(e))
        raise typer.Exit(1)

    if not result.success:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
