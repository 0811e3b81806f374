"""Shared type definitions."""

from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from filestream.domain.models import FileEntry

# Progress hook for pipeline runs (step number, total steps, operation display name)
StepProgressHook = Callable[[int, int, str], None]


@runtime_checkable
class CancellationSignal(Protocol):
    """Cooperative cancellation flag.

    ``threading.Event`` and ``asyncio.Event`` both satisfy this protocol.
    """

    def is_set(self) -> bool: ...


class FileSystemPort(Protocol):
    """Filesystem capabilities the engine calls through.

    Implementations must not raise for expected conditions (missing file,
    access denied, occupied destination); they return ``False``, ``None`` or
    an empty sequence instead.
    """

    async def list_entries(self, directory: str, recursive: bool = False) -> Sequence[FileEntry]: ...

    async def stat(self, path: str) -> FileEntry | None: ...

    async def exists(self, path: str) -> bool: ...

    async def rename(self, source_path: str, new_name: str) -> bool: ...

    async def move(self, source_path: str, destination_path: str) -> bool: ...

    async def delete(self, path: str) -> bool: ...

    async def create_directory(self, path: str) -> bool: ...


def is_cancelled(cancellation: CancellationSignal | None) -> bool:
    """Return True when a cancellation signal was given and has fired."""
    return cancellation is not None and cancellation.is_set()
