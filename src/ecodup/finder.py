import asyncio
import logging
import math
import numbers
import os
from pathlib import Path
from typing import Iterable, NamedTuple

from .commands.duplicated_dirs import find_duplicated_dirs
from .commands.duplicated_files import find_duplicated_files
from .commands.scan import ScanArgs, UnreadablePolicy, do_scan
from .errors import InvalidArgument
from .report.records import DuplicateScanResult
from .report.table import print_result
from .utils.processor import HashAlgorithm, Processor

logger = logging.getLogger(__name__)


class FinderArgs(NamedTuple):
    """Validated arguments of a duplicate scan."""
    root: Path
    size_threshold: float
    extensions: frozenset[str]
    n_cores: int
    hash_algorithm: HashAlgorithm
    on_unreadable: UnreadablePolicy
    excluded_paths: frozenset[Path]


def _validate_path(path) -> Path:
    if isinstance(path, str):
        if not path:
            raise InvalidArgument("The 'path' parameter must be a non-empty string or path", path=path)
    elif not isinstance(path, os.PathLike):
        raise InvalidArgument("The 'path' parameter must be a non-empty string or path", path=path)

    root = Path(path)
    if not root.is_dir():
        raise InvalidArgument("The specified 'path' does not exist or is not a directory", path=str(root))
    return root.absolute()


def _validate_extensions(extensions) -> frozenset[str]:
    if extensions is None:
        return frozenset()
    if isinstance(extensions, str):
        extensions = [extensions]

    try:
        candidates = list(extensions)
    except TypeError:
        raise InvalidArgument("The 'extensions' parameter must be a string or a list of strings",
                              extensions=extensions) from None

    normalized = set()
    for extension in candidates:
        if not isinstance(extension, str) or not extension:
            raise InvalidArgument("Every extension must be a non-empty string", extensions=candidates)
        if extension.startswith('.') or '/' in extension or os.sep in extension:
            raise InvalidArgument("Extensions must be given without a leading dot or path separators",
                                  extension=extension)
        normalized.add(extension.lower())
    return frozenset(normalized)


def _validate_size_threshold(size_threshold) -> float:
    if isinstance(size_threshold, bool) or not isinstance(size_threshold, numbers.Real):
        raise InvalidArgument("The 'size_threshold' parameter must be a number", size_threshold=size_threshold)
    if math.isnan(size_threshold) or size_threshold < 0:
        raise InvalidArgument("The 'size_threshold' parameter must be non-negative", size_threshold=size_threshold)
    return float(size_threshold)


def _validate_n_cores(n_cores) -> int:
    if isinstance(n_cores, bool) or not isinstance(n_cores, numbers.Integral) or n_cores < 1:
        raise InvalidArgument("The 'n_cores' parameter must be a positive integer", n_cores=n_cores)
    return int(n_cores)


def _validate_exclude(exclude) -> frozenset[Path]:
    if isinstance(exclude, (str, os.PathLike)):
        exclude = [exclude]

    try:
        candidates = list(exclude)
    except TypeError:
        raise InvalidArgument("The 'exclude' parameter must be a list of paths", exclude=exclude) from None

    excluded_paths = set()
    for excluded in candidates:
        if not isinstance(excluded, (str, os.PathLike)) or not str(excluded):
            raise InvalidArgument("Excluded paths must be non-empty strings or paths", exclude=excluded)
        excluded_path = Path(excluded)
        if excluded_path.is_absolute() or '..' in excluded_path.parts:
            raise InvalidArgument("Excluded paths must be relative to the scanned root", exclude=str(excluded))
        excluded_paths.add(excluded_path)
    return frozenset(excluded_paths)


def _validate_choice(name: str, value, choices: type[HashAlgorithm] | type[UnreadablePolicy]):
    try:
        return choices(value)
    except ValueError:
        raise InvalidArgument(f"The '{name}' parameter must be one of: {', '.join(choices)}",
                              **{name: value}) from None


def validate_arguments(path, size_threshold=0, extensions=None, n_cores=1, hash_algorithm='md5',
                       on_unreadable='abort', exclude: Iterable[str | os.PathLike] = ()) -> FinderArgs:
    """Check every argument of find_duplicates without touching anything below the root.

    The path is checked first, then the extensions, then the remaining arguments.

    Raises:
        InvalidArgument: An argument is missing, has the wrong type or is out of range
    """
    root = _validate_path(path)
    normalized_extensions = _validate_extensions(extensions)
    threshold = _validate_size_threshold(size_threshold)
    cores = _validate_n_cores(n_cores)
    algorithm = _validate_choice('hash_algorithm', hash_algorithm, HashAlgorithm)
    policy = _validate_choice('on_unreadable', on_unreadable, UnreadablePolicy)
    excluded_paths = _validate_exclude(exclude)

    return FinderArgs(root, threshold, normalized_extensions, cores, algorithm, policy, excluded_paths)


def run_finder(args: FinderArgs) -> DuplicateScanResult:
    """Scan once, then derive both duplicate tables from the same entries.

    The processor, and with it any worker pool, is released before this function returns, whether the
    scan succeeded or not.
    """
    with Processor(args.n_cores) as processor:
        outcome = asyncio.run(do_scan(ScanArgs(
            processor,
            args.root,
            args.hash_algorithm,
            args.extensions,
            args.on_unreadable,
            args.excluded_paths)))

    duplicated_dirs = None
    if not args.extensions:
        duplicated_dirs = find_duplicated_dirs(outcome.entries, args.root) or None

    duplicated_files = find_duplicated_files(outcome.entries, args.size_threshold) or None

    logger.info(f"Found {len(duplicated_files or [])} duplicate file groups and "
                f"{len(duplicated_dirs or [])} duplicated directories under {args.root}")
    return DuplicateScanResult(args.root, duplicated_files, duplicated_dirs, outcome.unreadable)


def find_duplicates(path, size_threshold=0, extensions=None, n_cores=1, verbose=True, *,
                    hash_algorithm='md5', on_unreadable='abort',
                    exclude: Iterable[str | os.PathLike] = ()) -> DuplicateScanResult | None:
    """Find duplicated files and directories below path.

    Files are duplicates when their content hashes are equal. Directories are duplicates when they hold
    the same number of files with the same multiset of content hashes; directories whose files all sit
    in a single child subdirectory are not reported, the child is.

    Args:
        path: Root directory to scan
        size_threshold: Minimum size in MB of a duplicate file group, 0 reports all
        extensions: Extensions without leading dot (``tar.gz`` included), matched case-insensitively as a
                    name suffix. When given, only those files are considered and duplicated directories
                    are not reported.
        n_cores: Number of worker processes hashing files; 1 hashes sequentially in this process
        verbose: Print the tables of both result sets
        hash_algorithm: 'md5', 'sha256' or 'mmh3'
        on_unreadable: 'abort' raises IOFailure on the first file or directory that cannot be read,
                       'skip' logs a warning and records the path in the result's ``unreadable`` list
        exclude: Paths relative to the root that are not scanned

    Returns:
        The scan result, or None when neither duplicated files nor duplicated directories were found

    Raises:
        InvalidArgument: An argument is invalid; raised before the tree is read
        IOFailure: A file could not be read and on_unreadable is 'abort'
    """
    args = validate_arguments(path, size_threshold, extensions, n_cores, hash_algorithm, on_unreadable, exclude)
    result = run_finder(args)

    if verbose:
        print_result(result)

    if result.is_empty():
        return None
    return result
