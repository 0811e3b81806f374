"""Configure tests."""

from datetime import datetime
from pathlib import PurePath

import pytest

from filestream.domain.models import FileEntry
from filestream.operations.base import OperationContext
from filestream.operations.registry import build_registry
from filestream.validation.validator import PathValidator


class MemoryFileSystem:
    """In-memory filesystem port that records every mutation call.

    Paths are plain strings such as ``C:/src/a.txt``. Sources listed in
    ``fail_on`` make a mutation return False; sources in ``raise_on`` make it
    raise OSError.
    """

    def __init__(self, entries=(), directories=()):
        self.files: dict[str, FileEntry] = {}
        self.directories: set[str] = set()
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self.raise_on: set[str] = set()
        for entry in entries:
            self.add_file(entry)
        for directory in directories:
            self._add_directory(directory)

    def add_file(self, entry: FileEntry) -> None:
        self.files[entry.full_path] = entry
        self._add_directory(str(PurePath(entry.full_path).parent))

    async def list_entries(self, directory, recursive=False):
        root = PurePath(directory)
        entries = []
        for path, entry in self.files.items():
            parent = PurePath(path).parent
            if parent == root or (recursive and root in parent.parents):
                entries.append(entry)
        return sorted(entries, key=lambda e: e.full_path)

    async def stat(self, path):
        return self.files.get(path)

    async def exists(self, path):
        return path in self.files or path in self.directories

    async def rename(self, source_path, new_name):
        self.calls.append(("rename", source_path, new_name))
        return self._relocate(source_path, str(PurePath(source_path).parent / new_name))

    async def move(self, source_path, destination_path):
        self.calls.append(("move", source_path, destination_path))
        return self._relocate(source_path, destination_path)

    async def delete(self, path):
        self.calls.append(("delete", path))
        return self.files.pop(path, None) is not None

    async def create_directory(self, path):
        self.calls.append(("create_directory", path))
        self._add_directory(path)
        return True

    @property
    def mutation_count(self) -> int:
        return len(self.calls)

    def _relocate(self, source, destination):
        if source in self.raise_on:
            raise OSError(f"I/O error on {source}")
        if source in self.fail_on or source not in self.files:
            return False
        if destination != source and destination in self.files:
            return False
        entry = self.files.pop(source)
        self.add_file(entry.with_path(destination))
        return True

    def _add_directory(self, directory):
        path = PurePath(directory)
        self.directories.add(str(path))
        self.directories.update(str(parent) for parent in path.parents if str(parent) != ".")


def make_entry(path, size=100, modified=datetime(2024, 3, 15, 10, 30), is_directory=False):
    """Create a file entry with sensible defaults."""
    return FileEntry(
        full_path=path,
        size=size,
        created=modified,
        modified=modified,
        is_directory=is_directory,
    )


@pytest.fixture
def entry_factory():
    """Factory for file entries."""
    return make_entry


@pytest.fixture
def sample_entries():
    """A small mixed batch of files in one folder."""
    return [
        make_entry("C:/src/report.pdf", size=2048, modified=datetime(2024, 3, 15)),
        make_entry("C:/src/notes.txt", size=120, modified=datetime(2024, 1, 10)),
        make_entry("C:/src/photo.jpg", size=500_000, modified=datetime(2023, 12, 24)),
        make_entry("C:/src/b.txt", size=10, modified=datetime(2024, 2, 1)),
        make_entry("C:/src/a.txt", size=10, modified=datetime(2024, 2, 2)),
    ]


@pytest.fixture
def memory_fs(sample_entries):
    """In-memory filesystem holding the sample entries."""
    return MemoryFileSystem(sample_entries)


@pytest.fixture
def validator(memory_fs):
    """Validator over the in-memory filesystem with default (windows) rules."""
    return PathValidator(memory_fs)


@pytest.fixture
def context(memory_fs, validator):
    """Operation context over the in-memory filesystem."""
    return OperationContext(filesystem=memory_fs, validator=validator)


@pytest.fixture
def registry(context):
    """Registry with the built-in operations."""
    return build_registry(context)


@pytest.fixture
def tmp_pipeline_file(tmp_path):
    """Create a temporary pipeline file path."""
    return tmp_path / "pipeline.json"
