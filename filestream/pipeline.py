"""Pipeline orchestration."""

from collections.abc import Iterable, Iterator
from logging import Logger

from filestream.domain.models import (
    ExecutionMode,
    FileEntry,
    OperationResult,
    PipelineResult,
    ValidationErrorKind,
    ValidationResult,
)
from filestream.domain.types import CancellationSignal, StepProgressHook, is_cancelled
from filestream.operations.base import Operation, OperationContext

logger = Logger(__file__)


class Pipeline:
    """Ordered list of operations run one after another.

    Each step receives the working set produced by the previous one. Steps
    never overlap: a step's filesystem effects are settled before the next
    step starts.
    """

    def __init__(self, context: OperationContext, operations: Iterable[Operation] | None = None):
        """Initialize the pipeline.

        Args:
            context: Context whose stop_on_error is the default for runs
            operations: Initial steps, in order
        """
        self.context = context
        self._operations: list[Operation] = []
        for operation in operations or []:
            self.add(operation)

    @property
    def operations(self) -> tuple[Operation, ...]:
        """Return the steps in order."""
        return tuple(self._operations)

    def add(self, operation: Operation) -> None:
        """Append a step. The same instance may appear more than once."""
        self._operations.append(self._require_operation(operation))

    def insert(self, index: int, operation: Operation) -> None:
        """Insert a step at ``index`` (0 to len inclusive)."""
        if index < 0 or index > len(self._operations):
            raise IndexError(f"Step index {index} out of range 0..{len(self._operations)}")
        self._operations.insert(index, self._require_operation(operation))

    def remove(self, operation: Operation) -> bool:
        """Remove the first step that is ``operation`` itself."""
        for index, candidate in enumerate(self._operations):
            if candidate is operation:
                del self._operations[index]
                return True
        return False

    def clear(self) -> None:
        """Remove all steps."""
        self._operations.clear()

    def duplicate(self, index: int) -> Operation:
        """Insert an independent copy of step ``index`` right after it."""
        copy = self._operations[index].clone()
        self._operations.insert(index + 1, copy)
        return copy

    def __len__(self) -> int:
        """Return the number of steps."""
        return len(self._operations)

    def __iter__(self) -> Iterator[Operation]:
        """Iterate over the steps in order."""
        return iter(self.operations)

    async def validate(
        self,
        entries: Iterable[FileEntry],
        cancellation: CancellationSignal | None = None,
        stop_on_error: bool | None = None,
    ) -> ValidationResult:
        """Validate every step against the caller's original entries.

        This is a static pre-flight check: steps are not simulated, so each
        one sees the unmodified input.
        """
        result = ValidationResult()
        stop = self._resolve_stop_on_error(stop_on_error)

        if not self._operations:
            result.add_warning("No operations in pipeline")
            return result

        entry_list = list(entries)
        for index, operation in enumerate(self.operations):
            step_number = index + 1
            if is_cancelled(cancellation):
                break

            try:
                validation = await operation.validate(entry_list, cancellation)
            except Exception as e:
                logger.error(f"Validation of step {step_number} raised: {e}")
                validation = ValidationResult.invalid(
                    f"Exception validating step {step_number} ({operation.display_name}): {e}",
                    ValidationErrorKind.GENERAL,
                )
            result.merge(validation)

            if not validation.is_valid and stop:
                break

        return result

    async def preview(
        self,
        entries: Iterable[FileEntry],
        cancellation: CancellationSignal | None = None,
        stop_on_error: bool | None = None,
        progress_hook: StepProgressHook | None = None,
    ) -> PipelineResult:
        """Run every step in preview mode; nothing is written."""
        return await self.execute(
            entries,
            cancellation,
            stop_on_error=stop_on_error,
            progress_hook=progress_hook,
            mode=ExecutionMode.PREVIEW,
        )

    async def execute(
        self,
        entries: Iterable[FileEntry],
        cancellation: CancellationSignal | None = None,
        stop_on_error: bool | None = None,
        progress_hook: StepProgressHook | None = None,
        mode: ExecutionMode = ExecutionMode.EXECUTE,
    ) -> PipelineResult:
        """Run the steps in order, threading the working set through them.

        Args:
            entries: Initial working set
            cancellation: Checked before every step and every entry
            stop_on_error: Override of the context default for this run
            progress_hook: Called with (step, total, name) before each step
            mode: EXECUTE applies changes, PREVIEW only computes them

        Returns:
            Per-step results with running totals and a summary
        """
        pipeline_result = PipelineResult()
        stop = self._resolve_stop_on_error(stop_on_error)
        current = list(entries)
        operations = self.operations

        if not operations:
            pipeline_result.success = False
            pipeline_result.summary = "No operations to execute"
            return pipeline_result

        for index, operation in enumerate(operations):
            step_number = index + 1

            if is_cancelled(cancellation):
                pipeline_result.success = False
                pipeline_result.summary = "Pipeline execution cancelled"
                break

            if progress_hook:
                progress_hook(step_number, len(operations), operation.display_name)

            logger.info(f"Step {step_number}: {operation.display_name} on {len(current)} entries")

            try:
                operation_result = await operation.execute(current, cancellation, mode=mode)
            except Exception as e:
                logger.error(f"Step {step_number} raised: {e}")
                pipeline_result.success = False
                pipeline_result.add_step_result(
                    step_number,
                    operation.display_name,
                    OperationResult.failure(f"Exception in step {step_number}: {e}", e),
                )
                if stop:
                    pipeline_result.summary = (
                        f"Pipeline stopped at step {step_number} due to exception"
                    )
                    break
                continue

            pipeline_result.add_step_result(step_number, operation.display_name, operation_result)

            if not operation_result.success:
                pipeline_result.success = False
                if stop:
                    pipeline_result.summary = f"Pipeline stopped at step {step_number} due to error"
                    break

            current = self._next_working_set(current, operation_result, mode)

        if not pipeline_result.summary:
            pipeline_result.summary = self._summarize(pipeline_result, mode)

        return pipeline_result

    @staticmethod
    def _next_working_set(
        current: list[FileEntry],
        result: OperationResult,
        mode: ExecutionMode,
    ) -> list[FileEntry]:
        """Compute the entries handed to the next step.

        An entry with an applied change continues under its new path. An
        entry whose change was recorded but not applied stays where it was.
        An entry the step recorded no change for drops out; this is how a
        filter narrows the set. A preview hands the same set forward, since
        nothing it computes has happened.
        """
        if result.output_entries is not None:
            return list(result.output_entries)

        # Previews apply nothing, and a step that never ran has no say
        if mode == ExecutionMode.PREVIEW or (not result.changes and not result.success):
            return current

        applied = {change.original_path: change.new_path for change in result.applied_changes}
        recorded = {change.original_path for change in result.changes}

        next_entries = []
        for entry in current:
            if entry.full_path in applied:
                next_entries.append(entry.with_path(applied[entry.full_path]))
            elif entry.full_path in recorded:
                next_entries.append(entry)
        return next_entries

    @staticmethod
    def _summarize(result: PipelineResult, mode: ExecutionMode) -> str:
        if mode == ExecutionMode.PREVIEW:
            if result.success:
                return f"Preview completed: {result.total_processed} files would be processed"
            return (
                f"Preview completed with errors: {result.total_processed} files would be "
                f"processed, {result.total_failed} failed"
            )
        if result.success:
            return (
                f"Pipeline completed: {result.total_processed} files processed, "
                f"{result.total_failed} failed"
            )
        return (
            f"Pipeline completed with errors: {result.total_processed} files processed, "
            f"{result.total_failed} failed"
        )

    def _resolve_stop_on_error(self, stop_on_error: bool | None) -> bool:
        return self.context.stop_on_error if stop_on_error is None else stop_on_error

    @staticmethod
    def _require_operation(operation: Operation) -> Operation:
        if not isinstance(operation, Operation):
            raise TypeError(f"Expected an Operation, got {type(operation).__name__}")
        return operation
