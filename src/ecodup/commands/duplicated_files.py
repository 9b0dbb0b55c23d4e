"""Group files by content hash."""

from typing import Iterable

from ..report.records import DuplicateFileGroup, MemberFile
from ..scan.entry import FileSystemEntry

BYTES_PER_MB = 1024 * 1024


def file_extension(name: str) -> str:
    """Lower-cased extension without the dot, empty when the name has none.

    A leading dot alone does not start an extension (``.bashrc`` has none).
    """
    stem, dot, extension = name.rpartition('.')
    if not dot or not stem:
        return ''
    return extension.lower()


def find_duplicated_files(entries: Iterable[FileSystemEntry], size_threshold: float = 0) -> list[DuplicateFileGroup]:
    """Build groups of at least two files with identical content hashes.

    Groups are seeded in relative path order so results do not depend on walk order. The size of a
    group is the size of its first member (members sorted by absolute path) in MB, rounded to two
    decimals. Groups smaller than size_threshold are dropped; the rest are numbered from 1 by
    descending size, ties keeping their seeding order.

    Args:
        entries: Walk output; directories are ignored
        size_threshold: Minimum representative size in MB, 0 keeps every group

    Returns:
        Duplicate file groups; empty when none survive the filter
    """
    by_hash: dict[str, list[FileSystemEntry]] = {}
    files = sorted((entry for entry in entries if not entry.is_directory),
                   key=lambda entry: entry.relative_path.parts)
    for entry in files:
        if entry.content_hash is None:
            raise ValueError(f"File entry {entry.relative_path} has no content hash")
        by_hash.setdefault(entry.content_hash, []).append(entry)

    candidates: list[tuple[float, str, list[FileSystemEntry]]] = []
    for content_hash, members in by_hash.items():
        if len(members) < 2:
            continue
        members.sort(key=lambda entry: str(entry.absolute_path))
        size_mb = round((members[0].size or 0) / BYTES_PER_MB, 2)
        if size_mb < size_threshold:
            continue
        candidates.append((size_mb, content_hash, members))

    # Stable sort keeps seeding order among equal sizes
    candidates.sort(key=lambda candidate: -candidate[0])

    groups: list[DuplicateFileGroup] = []
    for group_id, (size_mb, content_hash, members) in enumerate(candidates, start=1):
        extensions: list[str] = []
        for entry in members:
            extension = file_extension(entry.name or '')
            if extension not in extensions:
                extensions.append(extension)
        groups.append(DuplicateFileGroup(
            group_id,
            content_hash,
            [MemberFile.from_mtime_ns(entry.absolute_path, entry.relative_path, entry.mtime_ns or 0)
             for entry in members],
            size_mb,
            tuple(extensions)))

    return groups
