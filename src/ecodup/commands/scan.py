"""Walk a tree and classify every entry, hashing files on the processor."""

import logging
from asyncio import TaskGroup
from enum import StrEnum
from pathlib import Path
from typing import NamedTuple

from ..errors import IOFailure
from ..scan.entry import FileSystemEntry
from ..utils.processor import Processor
from ..utils.throttler import Throttler
from ..utils.walker import FileContext, WalkPolicy, walk_with_policy, extension_filter

logger = logging.getLogger(__name__)


class UnreadablePolicy(StrEnum):
    ABORT = 'abort'  # Raise IOFailure on the first file or directory that cannot be read
    SKIP = 'skip'  # Log a warning, leave the path out and keep scanning


class ScanArgs(NamedTuple):
    """Arguments for the scan stage."""
    processor: Processor
    root: Path
    hash_algorithm: str
    extensions: frozenset[str] = frozenset()  # Lower-cased, without leading dot; empty means all files
    on_unreadable: UnreadablePolicy = UnreadablePolicy.ABORT
    excluded_paths: frozenset[Path] = frozenset()  # Relative to root


class ScanOutcome(NamedTuple):
    entries: list[FileSystemEntry]
    unreadable: list[Path]


class ScanProcessor:
    """Processor for the scan stage that collects entries as hash jobs complete."""

    def __init__(self, args: ScanArgs):
        self._args = args
        self._processor = args.processor
        self._root = args.root
        self._entries: list[FileSystemEntry] = []
        self._unreadable: list[Path] = []

    def _policy(self) -> WalkPolicy:
        if self._args.extensions:
            # A partial view of a directory cannot establish its signature, so directories are left out
            return WalkPolicy(self._args.excluded_paths, extension_filter(self._args.extensions), False,
                              self._handle_walk_error)
        return WalkPolicy(self._args.excluded_paths, on_error=self._handle_walk_error)

    def _handle_unreadable(self, path: Path, error: OSError, message: str):
        if self._args.on_unreadable == UnreadablePolicy.SKIP:
            logger.warning(f"Skipping unreadable path: {path} ({error})")
            self._unreadable.append(path)
            return
        raise IOFailure(message, path=str(path), reason=str(error)) from error

    def _handle_walk_error(self, path: Path, error: OSError):
        self._handle_unreadable(path, error, "Cannot read directory entry while walking")

    async def run(self) -> ScanOutcome:
        try:
            async with TaskGroup() as tg:
                throttler = Throttler(tg, self._processor.concurrency * 2)

                for file_path, context in walk_with_policy(self._root, self._policy()):
                    if context.is_dir():
                        self._entries.append(FileSystemEntry.for_directory(self._root, context.relative_path))
                    else:
                        await throttler.schedule(self._handle_file(file_path, context))
        except ExceptionGroup as group:
            # Callers see the failure itself; the OSError stays its __cause__, the group its __context__
            raise _first_exception(group.subgroup(IOFailure) or group)

        return ScanOutcome(self._entries, self._unreadable)

    async def _handle_file(self, file_path: Path, context: FileContext):
        relative_path = context.relative_path
        if relative_path is None:
            raise ValueError(f"File context of {file_path} has no relative path")

        try:
            digest = await self._processor.digest(file_path, self._args.hash_algorithm)
        except OSError as e:
            self._handle_unreadable(file_path, e, "Cannot read file while hashing")
            return

        self._entries.append(
            FileSystemEntry.for_file(self._root, relative_path, digest.content_hash, digest.size, digest.mtime_ns))


def _first_exception(group: BaseExceptionGroup) -> BaseException:
    exception: BaseException = group
    while isinstance(exception, BaseExceptionGroup):
        exception = exception.exceptions[0]
    return exception


async def do_scan(args: ScanArgs) -> ScanOutcome:
    """Walk args.root and return one entry per reported file and directory."""
    logger.info(f"Scanning {args.root} (hash={args.hash_algorithm}, concurrency={args.processor.concurrency})")
    outcome = await ScanProcessor(args).run()
    logger.info(f"Scanned {args.root}: {len(outcome.entries)} entries, {len(outcome.unreadable)} unreadable")
    return outcome
