"""Recursive space traversal for the FTP space calculator.

Walks a remote directory tree depth-first and totals file sizes.
A directory that cannot be listed is recorded in the result's error
list; the walk continues with its siblings.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Tuple

from ftpspace.ftp.exceptions import FTPError
from ftpspace.ftp.listing import DirectoryEntry

logger = logging.getLogger("ftpspace.traversal")


DEFAULT_MAX_DEPTH = 10


class DirectoryLister(Protocol):
    """Anything that can list one remote directory."""

    def list_directory(self, path: str) -> List[DirectoryEntry]:
        ...


@dataclass(frozen=True)
class TraversalResult:
    """Aggregate totals of one completed traversal."""
    total_size: int = 0
    total_files: int = 0
    total_directories: int = 0
    processed_paths: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()

    @classmethod
    def empty(cls, errors: Tuple[str, ...] = ()) -> "TraversalResult":
        """Result with zero totals, used when no traversal could begin."""
        return cls(errors=tuple(errors))

    @property
    def has_errors(self) -> bool:
        """True if any directory could not be processed."""
        return bool(self.errors)

    def to_dict(self) -> dict:
        """Convert to the camelCase response shape."""
        return {
            "totalSize": self.total_size,
            "totalFiles": self.total_files,
            "totalDirectories": self.total_directories,
            "processedPaths": list(self.processed_paths),
            "errors": list(self.errors),
        }


@dataclass
class _Totals:
    """Mutable accumulator owned by a single run."""
    total_size: int = 0
    total_files: int = 0
    total_directories: int = 0
    processed_paths: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def freeze(self) -> TraversalResult:
        return TraversalResult(
            total_size=self.total_size,
            total_files=self.total_files,
            total_directories=self.total_directories,
            processed_paths=tuple(self.processed_paths),
            errors=tuple(self.errors),
        )


class SpaceTraversal:
    """Depth-first, pre-order walk that totals remote storage usage."""

    def __init__(
        self,
        lister: DirectoryLister,
        max_depth: int = DEFAULT_MAX_DEPTH,
        on_directory: Optional[Callable[[str], None]] = None
    ):
        """
        Initialize the traversal.

        Args:
            lister: Source of directory listings
            max_depth: Depth at which recursion stops (root is depth 0)
            on_directory: Called with each path after it is listed
        """
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self._lister = lister
        self._max_depth = max_depth
        self._on_directory = on_directory

    @property
    def max_depth(self) -> int:
        """Depth bound for this traversal."""
        return self._max_depth

    def run(self, path: str = "/") -> TraversalResult:
        """
        Walk the tree rooted at path.

        Args:
            path: Remote directory to start from

        Returns:
            Frozen TraversalResult
        """
        totals = _Totals()
        self._visit(path, 0, totals)

        logger.info(
            f"Traversal of {path} complete: {totals.total_files} files, "
            f"{totals.total_directories} directories, {totals.total_size} bytes, "
            f"{len(totals.errors)} errors"
        )
        return totals.freeze()

    def _visit(self, path: str, depth: int, totals: _Totals) -> None:
        if depth >= self._max_depth:
            message = f"Max depth reached for path: {path}"
            logger.warning(message)
            totals.errors.append(message)
            return

        logger.debug(f"Processing path: {path} (depth: {depth})")
        try:
            entries = self._lister.list_directory(path)
        except (FTPError, OSError) as e:
            message = f"Error processing {path}: {e}"
            logger.warning(message)
            totals.errors.append(message)
            return

        totals.processed_paths.append(path)
        if self._on_directory:
            self._on_directory(path)

        for entry in entries:
            if entry.is_directory:
                totals.total_directories += 1
                self._visit(entry.path, depth + 1, totals)
            else:
                totals.total_files += 1
                totals.total_size += entry.size
