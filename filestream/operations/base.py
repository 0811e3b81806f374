"""Operation abstraction and its validate/preview/execute lifecycle."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable, Mapping
from logging import Logger
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict

from filestream.domain.models import (
    Change,
    ExecutionMode,
    FileEntry,
    OperationResult,
    ValidationResult,
)
from filestream.domain.types import CancellationSignal, is_cancelled
from filestream.validation.validator import PathValidator

logger = Logger(__file__)


class OperationContext(BaseModel):
    """Collaborators and defaults shared by every operation of a run.

    The context is frozen; the execution mode travels as an explicit argument
    and stop-on-error can be overridden per pipeline run.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    filesystem: Any  # FileSystemPort
    validator: PathValidator
    stop_on_error: bool = True


class Operation(ABC):
    """A named unit of work over a batch of file entries.

    Subclasses declare their identity and configuration model as class
    attributes and implement ``_validate_specific`` and ``_execute_specific``.
    ``execute`` always re-validates first, because the filesystem may have
    changed since the caller last validated.
    """

    operation_id: ClassVar[str]
    display_name: ClassVar[str]
    description: ClassVar[str]
    configuration_model: ClassVar[type[BaseModel]]
    requires_entries: ClassVar[bool] = True

    def __init__(self, context: OperationContext, configuration: BaseModel | Mapping | None = None):
        """Initialize the operation.

        Args:
            context: Shared filesystem port, validator and defaults
            configuration: Configuration model or mapping; defaults when None
        """
        self.context = context
        self._configuration = self.configuration_model()
        if configuration is not None:
            self.configuration = configuration

    @property
    def configuration(self) -> Any:
        """Return the operation's configuration model."""
        return self._configuration

    @configuration.setter
    def configuration(self, value: BaseModel | Mapping) -> None:
        if isinstance(value, self.configuration_model):
            self._configuration = value
        elif isinstance(value, Mapping):
            self._configuration = self.configuration_model.model_validate(dict(value))
        else:
            raise ValueError(
                f"{type(self).__name__} expects {self.configuration_model.__name__}, "
                f"got {type(value).__name__}"
            )

    def validate_configuration(self) -> ValidationResult:
        """Check the configuration alone, without touching the filesystem."""
        return ValidationResult()

    async def validate(
        self,
        entries: Iterable[FileEntry],
        cancellation: CancellationSignal | None = None,
    ) -> ValidationResult:
        """Validate the entries and the operation-specific rules.

        Never mutates the filesystem.
        """
        result = ValidationResult()
        entry_list = list(entries)

        if not entry_list and self.requires_entries:
            result.add_error("No files selected for operation")
            return result

        for entry in entry_list:
            if is_cancelled(cancellation):
                break
            result.merge(await self.context.validator.validate_entry(entry))

        result.merge(await self._validate_specific(entry_list, cancellation))
        return result

    async def preview(
        self,
        entries: Iterable[FileEntry],
        cancellation: CancellationSignal | None = None,
    ) -> OperationResult:
        """Compute the changes without applying any of them."""
        return await self.execute(entries, cancellation, mode=ExecutionMode.PREVIEW)

    async def execute(
        self,
        entries: Iterable[FileEntry],
        cancellation: CancellationSignal | None = None,
        mode: ExecutionMode = ExecutionMode.EXECUTE,
    ) -> OperationResult:
        """Validate, then run the operation.

        Faults raised by the operation are returned as a failed result and
        never propagate.
        """
        entry_list = list(entries)

        try:
            validation = await self.validate(entry_list, cancellation)
            if not validation.is_valid:
                return OperationResult(
                    success=False,
                    message="Validation failed",
                    errors=[error.message for error in validation.errors],
                    validation=validation,
                )

            result = await self._execute_specific(entry_list, cancellation, mode)
            result.validation = validation
            if result.success and not result.message:
                result.message = (
                    "Preview completed successfully"
                    if mode == ExecutionMode.PREVIEW
                    else "Operation completed successfully"
                )
            return result
        except Exception as e:
            logger.error(f"{self.display_name} failed: {e}")
            return OperationResult.failure(f"Operation failed: {e}", e)

    def clone(self) -> "Operation":
        """Return an independent copy bound to the same context."""
        return type(self)(self.context, self.configuration.model_copy(deep=True))

    def describe(self) -> str:
        """Return a one-line summary of the non-default configuration."""
        settings = self.configuration.model_dump(mode="json", exclude_defaults=True)
        if not settings:
            return self.display_name
        details = ", ".join(f"{key}={value!r}" for key, value in settings.items())
        return f"{self.display_name} ({details})"

    def __repr__(self) -> str:
        """Return the operation id and configuration."""
        return f"{type(self).__name__}({self.configuration!r})"

    @abstractmethod
    async def _validate_specific(
        self,
        entries: list[FileEntry],
        cancellation: CancellationSignal | None,
    ) -> ValidationResult:
        """Operation-specific validation."""

    @abstractmethod
    async def _execute_specific(
        self,
        entries: list[FileEntry],
        cancellation: CancellationSignal | None,
        mode: ExecutionMode,
    ) -> OperationResult:
        """Operation-specific execution."""

    async def _apply_changes(
        self,
        changes: list[Change],
        apply: Callable[[Change], Awaitable[bool]],
        verb: str,
        cancellation: CancellationSignal | None,
        mode: ExecutionMode,
    ) -> OperationResult:
        """Apply changes one at a time, best effort.

        Every change is recorded whether or not it was applied. A failed or
        faulting entry is reported and the remaining entries still run.

        Args:
            changes: Changes in application order
            apply: Coroutine performing one change, returning success
            verb: Verb used in error messages ("rename", "move")
            cancellation: Checked before each entry
            mode: In preview mode ``apply`` is never called
        """
        result = OperationResult()

        for index, change in enumerate(changes):
            if is_cancelled(cancellation):
                mark_cancelled(result, index, len(changes))
                break

            if mode == ExecutionMode.PREVIEW:
                result.add_change(change)
                continue

            try:
                change.applied = await apply(change)
            except Exception as e:
                logger.error(f"Error during {verb} of {change.original_path}: {e}")
                result.add_change(change)
                result.add_error(f"Error during {verb} of {change.original_path}: {e}")
                continue

            result.add_change(change)
            if not change.applied:
                result.add_error(f"Failed to {verb}: {change.original_path}")

        return result


def mark_cancelled(result: OperationResult, handled: int, total: int) -> None:
    """Flag a result whose entry loop stopped on cancellation."""
    result.success = False
    result.message = f"Cancelled after {handled} of {total} entries"
