"""Persistence of finished scans in report directories."""

import json
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Any, Iterator

import plyvel

from ..errors import ReportNotFound
from .records import DuplicateDirectory, DuplicateFileGroup, DuplicateScanResult

FILE_GROUP_PREFIX = b'f'
DIRECTORY_PREFIX = b'd'


def _sequence_key(index: int) -> bytes:
    # Big endian so LevelDB's bytewise ordering matches numeric order
    return index.to_bytes(4, byteorder='big')


@dataclass
class ReportManifest:
    """Metadata of a saved scan, persisted as manifest.json in the report directory."""
    version: str = "1.0"
    """Report format version"""

    root: str = ""
    """Absolute path of the scanned root"""

    timestamp: str = ""
    """ISO format timestamp when the scan finished"""

    hash_algorithm: str = "md5"
    """Content hash used to group files"""

    size_threshold: float = 0
    """Minimum group size in MB applied to file groups"""

    extensions: list[str] = field(default_factory=list)
    """Extension filter of the scan; non-empty means directory detection was off"""

    file_groups: int = 0
    """Number of duplicate file groups stored"""

    duplicated_dirs: int = 0
    """Number of duplicated directory rows stored"""

    unreadable: list[str] = field(default_factory=list)
    """Files skipped because they could not be read"""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReportManifest":
        return cls(**data)


class ReportStore:
    """Reads and writes a scan report: manifest.json plus a LevelDB database of msgpack records.

    Keys in the database are a one-byte prefix and a 4-byte big-endian sequence number:
    ``f<group_id>`` holds a DuplicateFileGroup, ``d<row_index>`` a DuplicateDirectory. Iterating a
    prefix therefore yields rows in report order.
    """

    def __init__(self, report_dir: Path) -> None:
        self.report_dir: Path = report_dir
        self.manifest_path: Path = report_dir / 'manifest.json'
        self.database_path: Path = report_dir / 'database'
        self._database: plyvel.DB | None = None

    def create_report_directory(self) -> None:
        self.report_dir.mkdir(parents=True, exist_ok=True)

    def open_database(self, *, create_if_missing: bool = False) -> None:
        """Open the LevelDB database.

        Args:
            create_if_missing: Create the database if needed; otherwise raise ReportNotFound if it is absent
        """
        if create_if_missing:
            self.database_path.mkdir(parents=True, exist_ok=True)
        elif not self.database_path.exists():
            raise ReportNotFound("No report database found", path=str(self.database_path))
        self._database = plyvel.DB(str(self.database_path), create_if_missing=create_if_missing)

    def close_database(self) -> None:
        if self._database is not None:
            self._database.close()
            self._database = None

    def __enter__(self) -> "ReportStore":
        self.open_database()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close_database()

    def _require_database(self) -> plyvel.DB:
        if self._database is None:
            raise RuntimeError("Database not opened. Use context manager or call open_database().")
        return self._database

    def truncate(self) -> None:
        """Delete every record, so a report can be rewritten in place."""
        database = self._require_database()
        with database.write_batch() as batch:
            for key in database.iterator(include_value=False):
                batch.delete(key)

    def write_result(self, result: DuplicateScanResult) -> None:
        """Replace the stored records with those of result."""
        self.truncate()
        database = self._require_database()
        with database.write_batch() as batch:
            for group in result.duplicated_files or []:
                batch.put(FILE_GROUP_PREFIX + _sequence_key(group.group_id), group.to_msgpack())
            for index, row in enumerate(result.duplicated_dirs or []):
                batch.put(DIRECTORY_PREFIX + _sequence_key(index), row.to_msgpack())

    def iter_file_groups(self) -> Iterator[DuplicateFileGroup]:
        for _, value in self._require_database().prefixed_db(FILE_GROUP_PREFIX).iterator():
            yield DuplicateFileGroup.from_msgpack(value)

    def iter_duplicated_dirs(self) -> Iterator[DuplicateDirectory]:
        for _, value in self._require_database().prefixed_db(DIRECTORY_PREFIX).iterator():
            yield DuplicateDirectory.from_msgpack(value)

    def read_result(self) -> DuplicateScanResult:
        """Rebuild the scan result; absent tables come back as None like in a fresh scan."""
        manifest = self.read_manifest()
        file_groups = list(self.iter_file_groups())
        duplicated_dirs = list(self.iter_duplicated_dirs())
        return DuplicateScanResult(
            Path(manifest.root),
            file_groups or None,
            duplicated_dirs or None,
            [Path(path) for path in manifest.unreadable])

    def write_manifest(self, manifest: ReportManifest) -> None:
        with open(self.manifest_path, 'w') as f:
            json.dump(manifest.to_dict(), f, indent=2)

    def read_manifest(self) -> ReportManifest:
        """Read manifest.json.

        Raises:
            ReportNotFound: If manifest.json doesn't exist
        """
        try:
            with open(self.manifest_path, 'r') as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ReportNotFound("No report manifest found", path=str(self.manifest_path)) from e
        return ReportManifest.from_dict(data)
