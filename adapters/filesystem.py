"""
Filesystem adapter for record discovery.

This module lists the candidate record files under a storage directory. The
listing is recursive and deterministic (entries are visited in sorted order),
and it never descends into version-control or build-cache directories.
"""

from pathlib import Path
from typing import Protocol

from constants import IGNORED_DIRS
from core.exceptions import PathEnumerationError


class PathLister(Protocol):
    """Protocol for enumerating the files below a directory."""

    def list_paths(self, root: Path) -> list[Path]:
        """
        List every file below root, recursively.

        Raises:
            PathEnumerationError: If a directory cannot be read.
        """


class FilesystemPathLister:
    """
    Lists files on disk, skipping ignored directories at any depth.

    Attributes:
        ignored_dirs: Directory names that are never entered.
    """

    def __init__(self, ignored_dirs: frozenset[str] = IGNORED_DIRS):
        self.ignored_dirs = ignored_dirs

    def list_paths(self, root: Path) -> list[Path]:
        """
        List every file below root, in sorted order.

        Args:
            root: The directory to enumerate.

        Returns:
            The paths of all files below root, ignored subtrees excluded.

        Raises:
            PathEnumerationError: If root, or one of its subdirectories,
                cannot be listed.
        """
        try:
            entries = sorted(root.iterdir())
        except OSError as e:
            raise PathEnumerationError(
                message=f"Could not list directory: {root}",
                file_path=str(root),
                original_exception=e,
            ) from e

        paths: list[Path] = []
        for entry in entries:
            if entry.is_dir():
                if entry.name in self.ignored_dirs:
                    continue
                paths.extend(self.list_paths(entry))
            else:
                paths.append(entry)
        return paths


class MockPathLister:
    """
    Mock implementation of PathLister for testing.

    Returns a fixed mapping of directory to paths, or raises a configured error.
    """

    def __init__(
        self,
        paths_by_root: dict[Path, list[Path]] | None = None,
        error: PathEnumerationError | None = None,
    ):
        self.paths_by_root = paths_by_root or {}
        self.error = error
        self.list_paths_calls: list[Path] = []

    def list_paths(self, root: Path) -> list[Path]:
        self.list_paths_calls.append(root)
        if self.error is not None:
            raise self.error
        return list(self.paths_by_root.get(root, []))
