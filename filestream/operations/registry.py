"""Registry mapping operation identifiers to constructors."""

from collections.abc import Callable

from filestream.operations.base import Operation, OperationContext
from filestream.operations.filter import FilterOperation
from filestream.operations.move import MoveOperation
from filestream.operations.rename import RenameOperation
from filestream.operations.source import SourceOperation

OperationFactory = Callable[[OperationContext], Operation]


class OperationRegistry:
    """Creates operations by identifier.

    This is the extension seam for new operation types: register a factory
    and pipelines (including stored ones) can use it without further changes.
    """

    def __init__(self, context: OperationContext):
        """Initialize an empty registry.

        Args:
            context: Context handed to every operation the registry creates
        """
        self.context = context
        self._factories: dict[str, OperationFactory] = {}

    def register(self, operation_id: str, factory: OperationFactory) -> None:
        """Register (or replace) the factory for ``operation_id``."""
        if not operation_id or not operation_id.strip():
            raise ValueError("Operation ID cannot be empty")
        if not callable(factory):
            raise TypeError(f"Factory for {operation_id} must be callable")
        self._factories[operation_id] = factory

    def create(self, operation_id: str) -> Operation:
        """Create a new operation with default configuration."""
        if operation_id not in self._factories:
            raise ValueError(f"Unknown operation ID: {operation_id}")
        return self._factories[operation_id](self.context)

    def registered(self) -> list[str]:
        """Return the registered identifiers in registration order."""
        return list(self._factories)

    def is_registered(self, operation_id: str) -> bool:
        """Return True when ``operation_id`` has a factory."""
        return operation_id in self._factories

    def __contains__(self, operation_id: object) -> bool:
        """Support ``operation_id in registry``."""
        return operation_id in self._factories


def build_registry(context: OperationContext) -> OperationRegistry:
    """Return a registry holding the built-in operations."""
    registry = OperationRegistry(context)
    for operation_class in (SourceOperation, FilterOperation, RenameOperation, MoveOperation):
        registry.register(operation_class.operation_id, operation_class)
    return registry
