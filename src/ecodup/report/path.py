"""Report path utilities."""

import os
from pathlib import Path

REPORT_SUFFIX = '.dups'


def get_report_directory_path(root: Path) -> Path:
    """Generate the default report directory for a scanned root.

    The report sits next to the root, never inside it, so a later scan of the same root does not
    pick it up.

    Examples:
        /data/survey -> /data/survey.dups
        /data/survey/ -> /data/survey.dups
    """
    root = root if root.is_absolute() else Path.cwd() / root
    # normpath drops trailing separators and . components without following symlinks
    return Path(os.path.normpath(str(root)) + REPORT_SUFFIX)


def relative_to_root(path: Path, root: Path) -> Path | None:
    """Return path relative to root, or None when path is not below root."""
    path = Path(os.path.normpath(str(path if path.is_absolute() else Path.cwd() / path)))
    root = Path(os.path.normpath(str(root if root.is_absolute() else Path.cwd() / root)))
    try:
        relative = path.relative_to(root)
    except ValueError:
        return None
    return None if relative == Path('.') else relative
