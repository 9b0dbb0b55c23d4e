"""Result records of a duplicate scan."""

import datetime
from pathlib import Path
from typing import Any

import msgpack

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.UTC)


def _pack(data: list[Any]) -> bytes:
    result = msgpack.packb(data, datetime=True)
    assert isinstance(result, bytes)
    return result


def _unpack(data: bytes) -> list[Any]:
    decoded = msgpack.unpackb(data, timestamp=3)
    assert isinstance(decoded, list)
    return decoded


class MemberFile:
    """A file belonging to a group of content-identical files.

    Attributes:
        absolute_path: Path including the scanned root
        relative_path: Path relative to the scanned root
        modification_time: Modification time as a timezone-aware UTC datetime
    """

    def __init__(self, absolute_path: Path, relative_path: Path, modification_time: datetime.datetime):
        self.absolute_path = absolute_path
        self.relative_path = relative_path
        self.modification_time = modification_time

    @classmethod
    def from_mtime_ns(cls, absolute_path: Path, relative_path: Path, mtime_ns: int) -> "MemberFile":
        # Truncated to microseconds, the resolution of datetime
        modification_time = _EPOCH + datetime.timedelta(microseconds=mtime_ns // 1000)
        return cls(absolute_path, relative_path, modification_time)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MemberFile):
            return False
        return (self.absolute_path == other.absolute_path and
                self.relative_path == other.relative_path and
                self.modification_time == other.modification_time)

    def __repr__(self) -> str:
        return f"MemberFile({str(self.relative_path)!r}, modified={self.modification_time.isoformat()})"


class DuplicateFileGroup:
    """Files sharing one content hash.

    Attributes:
        group_id: 1-based identifier; groups are numbered by descending representative size
        content_hash: The hex digest shared by all members
        members: Member files sorted by absolute path, at least two
        representative_size_mb: Size of the first member in MB, rounded to two decimals
        extensions_present: Distinct lower-cased extensions of the members, in member order
    """

    def __init__(self, group_id: int, content_hash: str, members: list[MemberFile],
                 representative_size_mb: float, extensions_present: tuple[str, ...]):
        self.group_id = group_id
        self.content_hash = content_hash
        self.members = members
        self.representative_size_mb = representative_size_mb
        self.extensions_present = extensions_present

    @property
    def member_count(self) -> int:
        return len(self.members)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DuplicateFileGroup):
            return False
        return (self.group_id == other.group_id and
                self.content_hash == other.content_hash and
                self.members == other.members and
                self.representative_size_mb == other.representative_size_mb and
                self.extensions_present == other.extensions_present)

    def __repr__(self) -> str:
        return (f"DuplicateFileGroup({self.group_id}, {self.content_hash}, "
                f"n={self.member_count}, size_mb={self.representative_size_mb})")

    def to_msgpack(self) -> bytes:
        """Serialize to msgpack.

        Returns:
            Msgpack-encoded bytes containing [group_id, content_hash, member_data, representative_size_mb,
            extensions_present] where member_data is a list of [absolute_path, relative_path_components,
            modification_time]
        """
        member_data = [
            [str(member.absolute_path), list(member.relative_path.parts), member.modification_time]
            for member in self.members
        ]
        return _pack([self.group_id, self.content_hash, member_data, self.representative_size_mb,
                      list(self.extensions_present)])

    @classmethod
    def from_msgpack(cls, data: bytes) -> "DuplicateFileGroup":
        group_id, content_hash, member_data, representative_size_mb, extensions_present = _unpack(data)
        members = [
            MemberFile(Path(absolute_path), Path(*relative_components), modification_time)
            for absolute_path, relative_components, modification_time in member_data
        ]
        return cls(group_id, content_hash, members, representative_size_mb, tuple(extensions_present))


class DuplicateDirectory:
    """A directory whose file content equals that of at least one other directory.

    Attributes:
        group_id: Identifier shared by all directories with the same signature
        directory_path: Path relative to the scanned root
        directory_absolute_path: Path including the scanned root
        file_count: Number of files below the directory
        duplicate_count_in_group: Number of directories sharing the signature
    """

    def __init__(self, group_id: int, directory_path: Path, directory_absolute_path: Path, file_count: int,
                 duplicate_count_in_group: int):
        self.group_id = group_id
        self.directory_path = directory_path
        self.directory_absolute_path = directory_absolute_path
        self.file_count = file_count
        self.duplicate_count_in_group = duplicate_count_in_group

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DuplicateDirectory):
            return False
        return (self.group_id == other.group_id and
                self.directory_path == other.directory_path and
                self.directory_absolute_path == other.directory_absolute_path and
                self.file_count == other.file_count and
                self.duplicate_count_in_group == other.duplicate_count_in_group)

    def __repr__(self) -> str:
        return (f"DuplicateDirectory({self.group_id}, {str(self.directory_path)!r}, "
                f"files={self.file_count}, dups={self.duplicate_count_in_group})")

    def to_msgpack(self) -> bytes:
        return _pack([self.group_id, list(self.directory_path.parts), str(self.directory_absolute_path),
                      self.file_count, self.duplicate_count_in_group])

    @classmethod
    def from_msgpack(cls, data: bytes) -> "DuplicateDirectory":
        group_id, path_components, absolute_path, file_count, duplicate_count = _unpack(data)
        return cls(group_id, Path(*path_components), Path(absolute_path), file_count, duplicate_count)


class DuplicateScanResult:
    """Outcome of a duplicate scan.

    ``duplicated_files`` and ``duplicated_dirs`` are None when the respective table is absent: nothing was
    found, or (for directories) an extension filter disabled directory detection.
    """

    def __init__(self, root: Path, duplicated_files: list[DuplicateFileGroup] | None = None,
                 duplicated_dirs: list[DuplicateDirectory] | None = None, unreadable: list[Path] | None = None):
        self.root = root
        self.duplicated_files = duplicated_files
        self.duplicated_dirs = duplicated_dirs
        self.unreadable: list[Path] = unreadable or []

    def is_empty(self) -> bool:
        return not self.duplicated_files and not self.duplicated_dirs

    def __repr__(self) -> str:
        n_files = len(self.duplicated_files) if self.duplicated_files else 0
        n_dirs = len(self.duplicated_dirs) if self.duplicated_dirs else 0
        return f"DuplicateScanResult({str(self.root)!r}, file_groups={n_files}, dirs={n_dirs})"
