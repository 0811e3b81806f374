"""Filesystem port implementations."""

from filestream.filesystem.local import LocalFileSystem, entry_from_path

__all__ = ["LocalFileSystem", "entry_from_path"]
