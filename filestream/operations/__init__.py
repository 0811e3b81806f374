"""File operations.

Public API:
    Lifecycle:
        - Operation: Base class (validate, preview, execute, clone)
        - OperationContext: Filesystem port, validator and defaults

    Built-in operations:
        - SourceOperation: Load files from a folder
        - FilterOperation: Keep entries matching name/extension/size/date
        - RenameOperation: Prefix, suffix, numbering, replace and case rules
        - MoveOperation: Organize into folders by parent, extension and date

    Extension:
        - OperationRegistry / build_registry: Identifier to constructor mapping
"""

from filestream.operations.base import Operation, OperationContext
from filestream.operations.filter import FilterConfiguration, FilterOperation
from filestream.operations.move import MoveConfiguration, MoveOperation
from filestream.operations.registry import OperationRegistry, build_registry
from filestream.operations.rename import CaseTransform, RenameConfiguration, RenameOperation
from filestream.operations.source import SourceConfiguration, SourceOperation

__all__ = [
    # Lifecycle
    "Operation",
    "OperationContext",
    # Built-in operations
    "SourceOperation",
    "SourceConfiguration",
    "FilterOperation",
    "FilterConfiguration",
    "RenameOperation",
    "RenameConfiguration",
    "CaseTransform",
    "MoveOperation",
    "MoveConfiguration",
    # Extension
    "OperationRegistry",
    "build_registry",
]
