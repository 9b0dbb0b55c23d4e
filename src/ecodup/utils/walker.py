import functools
import logging
import os
import stat
from pathlib import Path
from typing import Callable, Generator, Iterator, NamedTuple

logger = logging.getLogger(__name__)


class FileContext:
    """Context object for a file or directory during traversal.

    Only the name and the parent link are stored; ``relative_path`` is derived from
    the chain of parents and cached. To get the full path of an entry, join the scan
    root with ``relative_path``.
    """
    def __init__(self, parent, name: str | None, path: Path | None = None, st: os.stat_result | None = None):
        self._parent: FileContext | None = parent
        self._name: str | None = name
        self._stat: os.stat_result | None = st
        self._path: Path | None = path

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def parent(self) -> 'FileContext':
        if self._parent is None:
            raise LookupError("no parent")

        return self._parent

    @property
    def stat(self) -> os.stat_result:
        if self._stat is None:
            if self._path is None:
                raise LookupError("stat not available and path not provided")
            self._stat = self._path.stat(follow_symlinks=False)
        return self._stat

    @functools.cached_property
    def relative_path(self) -> Path | None:
        """Path from the root context, built by reusing the parent's cached result."""
        if self._name is None:
            return None

        if self._parent is None:
            return Path(self._name)

        parent_path = self._parent.relative_path
        if parent_path is None:
            return Path(self._name)

        return parent_path / self._name

    def is_file(self):
        return stat.S_ISREG(self.stat.st_mode)

    def is_dir(self):
        return stat.S_ISDIR(self.stat.st_mode)


def walk(path: Path, parent: FileContext,
         on_error: Callable[[Path, OSError], None] | None = None
         ) -> Generator[tuple[Path, FileContext], bool | None, None]:
    """Recursively traverse a directory without following symlinks.

    Sending False back after an entry was yielded prunes it: a directory is then not descended into.

    Every entry is stat'ed before it is yielded. A directory that cannot be listed or an entry that
    cannot be stat'ed is passed to on_error together with the OSError and left out; without on_error
    the OSError propagates.
    """
    try:
        children = list(path.iterdir())
    except OSError as e:
        if on_error is None:
            raise
        on_error(path, e)
        return

    child: Path
    for child in children:
        context = FileContext(parent, child.name, path=child)
        try:
            context.stat
        except OSError as e:
            if on_error is None:
                raise
            on_error(child, e)
            continue

        keep = yield child, context

        if keep is False:
            continue

        if context.is_dir():
            yield from walk(child, context, on_error)


class WalkPolicy(NamedTuple):
    """Policy controlling which entries a walk reports.

    Attributes:
        excluded_paths: Relative paths skipped entirely, including everything below them
        include_file: Predicate deciding whether a regular file is reported
        yield_directories: Whether directories themselves are reported (they are descended into either way)
        on_error: Receives the path and the OSError of an entry that could not be listed or stat'ed;
                  None lets the error propagate
    """
    excluded_paths: frozenset[Path] = frozenset()
    include_file: Callable[[FileContext], bool] = lambda context: True
    yield_directories: bool = True
    on_error: Callable[[Path, OSError], None] | None = None


def walk_with_policy(path: Path, policy: WalkPolicy) -> Iterator[tuple[Path, FileContext]]:
    """Walk a tree below path, reporting regular files and directories as the policy allows.

    Symlinks and special files are never reported. The root itself is not reported either;
    relative paths of reported contexts start below it.

    Yields:
        Tuples of (absolute_path, file_context)
    """
    context = FileContext(None, None, path)
    gen = walk(path, context, policy.on_error)
    pending = None

    try:
        while True:
            file_path, file_context = gen.send(pending)
            pending = None

            if file_context.relative_path in policy.excluded_paths:
                pending = False
                continue

            if file_context.is_dir():
                if policy.yield_directories:
                    yield file_path, file_context
            elif file_context.is_file():
                if policy.include_file(file_context):
                    yield file_path, file_context
            else:
                logger.debug(f"Ignoring symlink or special file: {file_path}")
    except StopIteration:
        pass


def extension_filter(extensions: frozenset[str]) -> Callable[[FileContext], bool]:
    """Build a predicate accepting files whose name ends with one of the extensions, case-insensitively.

    Extensions may span several dots (``tar.gz`` matches ``a.tar.gz``).

    Args:
        extensions: Lower-cased extensions without a leading dot
    """
    suffixes = tuple(f".{extension}" for extension in extensions)

    def include_file(context: FileContext) -> bool:
        if context.name is None:
            return False
        name = context.name.lower()
        # A leading dot alone does not start an extension, so the suffix must not be the whole name
        return any(name.endswith(suffix) and len(name) > len(suffix) for suffix in suffixes)

    return include_file
