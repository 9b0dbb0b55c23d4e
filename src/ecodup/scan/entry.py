"""Records produced by the filesystem walk."""
from pathlib import Path
from typing import NamedTuple


class FileSystemEntry(NamedTuple):
    """One file or directory discovered under the scanned root.

    Attributes:
        absolute_path: Path of the entry including the scanned root
        relative_path: Path of the entry relative to the scanned root
        is_directory: Whether the entry is a directory
        content_hash: Hex digest of the file content, None for directories
        name: Base name of a file, None for directories (they are identified by their path)
        ancestor_path_segments: Relative path components of the containing directory for files,
                                all relative path components for directories
        size: File size in bytes, None for directories
        mtime_ns: Modification time in nanoseconds, None for directories
    """
    absolute_path: Path
    relative_path: Path
    is_directory: bool
    content_hash: str | None
    name: str | None
    ancestor_path_segments: tuple[str, ...]
    size: int | None = None
    mtime_ns: int | None = None

    @classmethod
    def for_directory(cls, root: Path, relative_path: Path) -> 'FileSystemEntry':
        return cls(root / relative_path, relative_path, True, None, None, relative_path.parts)

    @classmethod
    def for_file(cls, root: Path, relative_path: Path, content_hash: str, size: int,
                 mtime_ns: int) -> 'FileSystemEntry':
        return cls(root / relative_path, relative_path, False, content_hash, relative_path.name,
                   relative_path.parts[:-1], size, mtime_ns)

    @property
    def depth(self) -> int:
        return len(self.ancestor_path_segments)


def cumulative_path(segments: tuple[str, ...], depth: int) -> tuple[str, ...] | None:
    """Truncate path segments to the given 1-based depth.

    Returns:
        The first ``depth`` segments, or None when there are fewer than ``depth`` segments
    """
    if depth < 1 or len(segments) < depth:
        return None
    return segments[:depth]


def join_segments(segments: tuple[str, ...]) -> str:
    return '/'.join(segments)
