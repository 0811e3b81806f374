"""Filesystem port backed by the local disk."""

import asyncio
import os
import shutil
from datetime import datetime
from logging import Logger
from pathlib import Path

from filestream.domain.models import FileEntry

logger = Logger(__file__)


def _created_timestamp(stat: os.stat_result) -> float:
    """Return the birth time where the platform records one, else ctime."""
    return getattr(stat, "st_birthtime", stat.st_ctime)


def entry_from_path(path: Path) -> FileEntry:
    """Build a FileEntry from an existing path.

    Args:
        path: Existing file or directory

    Returns:
        Entry describing the path

    Raises:
        OSError: If the path cannot be stat'ed
    """
    stat = path.stat()
    is_directory = path.is_dir()
    return FileEntry(
        full_path=str(path.absolute()),
        size=0 if is_directory else stat.st_size,
        created=datetime.fromtimestamp(_created_timestamp(stat)),
        modified=datetime.fromtimestamp(stat.st_mtime),
        is_directory=is_directory,
        attributes={
            "read_only": not os.access(path, os.W_OK),
            "hidden": path.name.startswith("."),
        },
    )


class LocalFileSystem:
    """Filesystem port over pathlib and shutil.

    Blocking calls are offloaded with ``asyncio.to_thread``. Expected failures
    (missing source, occupied destination, permission errors) are logged and
    reported as ``False``/``None``; nothing is overwritten.
    """

    async def list_entries(self, directory: str, recursive: bool = False) -> list[FileEntry]:
        """List files and directories below ``directory``."""
        return await asyncio.to_thread(self._list_entries, Path(directory), recursive)

    async def stat(self, path: str) -> FileEntry | None:
        """Describe a single path, or return None when it does not exist."""
        return await asyncio.to_thread(self._stat, Path(path))

    async def exists(self, path: str) -> bool:
        """Return True when a file or directory exists at ``path``."""
        return await asyncio.to_thread(os.path.lexists, path)

    async def rename(self, source_path: str, new_name: str) -> bool:
        """Rename an entry within its directory."""
        source = Path(source_path)
        return await asyncio.to_thread(self._relocate, source, source.with_name(new_name))

    async def move(self, source_path: str, destination_path: str) -> bool:
        """Move an entry, creating missing parent directories."""
        return await asyncio.to_thread(
            self._relocate, Path(source_path), Path(destination_path), True
        )

    async def delete(self, path: str) -> bool:
        """Delete a file or a directory tree."""
        return await asyncio.to_thread(self._delete, Path(path))

    async def create_directory(self, path: str) -> bool:
        """Create a directory and its parents; succeed if it already exists."""
        return await asyncio.to_thread(self._create_directory, Path(path))

    def _list_entries(self, directory: Path, recursive: bool) -> list[FileEntry]:
        if not directory.is_dir():
            logger.warning(f"Cannot list {directory}: not a directory")
            return []

        candidates = directory.rglob("*") if recursive else directory.iterdir()
        entries = []
        try:
            for path in sorted(candidates):
                try:
                    entries.append(entry_from_path(path))
                except OSError as e:
                    logger.warning(f"Skipping unreadable entry {path}: {e}")
        except OSError as e:
            logger.warning(f"Failed to list {directory}: {e}")
        return entries

    def _stat(self, path: Path) -> FileEntry | None:
        try:
            return entry_from_path(path)
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Failed to stat {path}: {e}")
            return None

    def _relocate(self, source: Path, destination: Path, create_parents: bool = False) -> bool:
        if not os.path.lexists(source):
            logger.warning(f"Source does not exist: {source}")
            return False

        # A case-only rename on a case-insensitive filesystem targets the source itself
        if os.path.lexists(destination) and not self._same_entry(source, destination):
            logger.warning(f"Refusing to overwrite existing destination: {destination}")
            return False

        try:
            if create_parents:
                destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(destination))
        except OSError as e:
            logger.warning(f"Failed to move {source} to {destination}: {e}")
            return False
        return True

    def _delete(self, path: Path) -> bool:
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            elif os.path.lexists(path):
                path.unlink()
            else:
                return False
        except OSError as e:
            logger.warning(f"Failed to delete {path}: {e}")
            return False
        return True

    def _create_directory(self, path: Path) -> bool:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Failed to create directory {path}: {e}")
            return False
        return True

    @staticmethod
    def _same_entry(source: Path, destination: Path) -> bool:
        try:
            return os.path.samefile(source, destination)
        except OSError:
            return False
