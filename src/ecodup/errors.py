"""Exception types raised by ecodup."""
from typing import Any


class EcodupError(Exception):
    """Base class for errors raised by ecodup.

    Keyword arguments are kept as context and rendered below the message, one
    ``key: value`` line each, so callers can see which input was rejected.

    Example:
        >>> str(InvalidArgument("The 'path' must be a directory", path='/tmp/x'))
        "The 'path' must be a directory\\n  path: '/tmp/x'"
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.context = context
        super().__init__(self._render())

    def _render(self) -> str:
        if not self.context:
            return self.message
        lines = [self.message]
        for key, value in self.context.items():
            lines.append(f"  {key}: {value!r}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self._render()


class InvalidArgument(EcodupError, ValueError):
    """An argument was rejected before any filesystem traversal started."""


class IOFailure(EcodupError, OSError):
    """A file could not be read while hashing."""


class ReportNotFound(EcodupError, FileNotFoundError):
    """No saved report exists at the requested location."""
