"""Detect directories holding identical sets of files.

A directory's signature is its file count together with the sorted content hashes
of every file below it, so names and layout inside the directory do not matter.
Directories that only wrap a single child subdirectory are left out: their
signature always equals the child's, and reporting both would repeat the same
match once per nesting level.
"""

from collections import defaultdict
from pathlib import Path
from typing import Iterable, Iterator, NamedTuple

from ..report.records import DuplicateDirectory
from ..scan.entry import FileSystemEntry, cumulative_path

SIGNATURE_SEPARATOR = '|'


class DirectoryLevelGroup(NamedTuple):
    """Files found below one directory at one depth level.

    Attributes:
        depth_level: 1-based nesting depth of the directory below the scan root
        directory_path: Path segments of the directory relative to the scan root
        file_count: Number of files anywhere below the directory
        sorted_content_hashes: Content hashes of those files in ascending order
        is_passthrough_wrapper: No file sits directly in the directory and all files share one child
    """
    depth_level: int
    directory_path: tuple[str, ...]
    file_count: int
    sorted_content_hashes: tuple[str, ...]
    is_passthrough_wrapper: bool

    @property
    def signature(self) -> tuple[int, str]:
        return self.file_count, SIGNATURE_SEPARATOR.join(self.sorted_content_hashes)


def _is_passthrough_wrapper(depth_level: int, files: list[FileSystemEntry]) -> bool:
    children = set()
    for entry in files:
        remainder = entry.ancestor_path_segments[depth_level:]
        if not remainder:
            return False
        children.add(remainder[0])
    return len(children) == 1


def directory_level_groups(entries: Iterable[FileSystemEntry]) -> Iterator[DirectoryLevelGroup]:
    """Compute a group for every discovered directory that contains at least one file.

    Args:
        entries: Walk output; directories determine which paths are considered, files provide the content

    Yields:
        Groups level by level, starting at depth 1
    """
    files: list[FileSystemEntry] = []
    directories: set[tuple[str, ...]] = set()
    for entry in entries:
        if entry.is_directory:
            directories.add(entry.ancestor_path_segments)
        else:
            files.append(entry)

    if not directories:
        return

    max_depth = max(len(directory) for directory in directories)
    for depth_level in range(1, max_depth + 1):
        buckets: dict[tuple[str, ...], list[FileSystemEntry]] = defaultdict(list)
        for entry in files:
            prefix = cumulative_path(entry.ancestor_path_segments, depth_level)
            if prefix is not None and prefix in directories:
                buckets[prefix].append(entry)

        for directory_path in sorted(buckets):
            contained = buckets[directory_path]
            yield DirectoryLevelGroup(
                depth_level,
                directory_path,
                len(contained),
                tuple(sorted(entry.content_hash for entry in contained)),
                _is_passthrough_wrapper(depth_level, contained))


def find_duplicated_dirs(entries: Iterable[FileSystemEntry], root: Path) -> list[DuplicateDirectory]:
    """Report directories whose signature is shared by at least one other non-wrapper directory.

    Group identifiers are assigned in ascending signature order. Rows are ordered by file count
    descending, then group, then path.

    Args:
        entries: Walk output collected without an extension filter
        root: Scan root used to build absolute paths

    Returns:
        One row per duplicated directory; empty when there are none
    """
    by_signature: dict[tuple[int, str], list[DirectoryLevelGroup]] = defaultdict(list)
    for group in directory_level_groups(entries):
        if not group.is_passthrough_wrapper:
            by_signature[group.signature].append(group)

    duplicated = sorted(signature for signature, groups in by_signature.items() if len(groups) > 1)

    rows: list[DuplicateDirectory] = []
    for group_id, signature in enumerate(duplicated, start=1):
        members = by_signature[signature]
        for member in members:
            directory_path = Path(*member.directory_path)
            rows.append(DuplicateDirectory(group_id, directory_path, root / directory_path, member.file_count,
                                           len(members)))

    rows.sort(key=lambda row: (-row.file_count, row.group_id, row.directory_path.parts))
    return rows
