"""Remote path validation."""

import posixpath
from typing import Final

# Characters that would split a single shell command line
FORBIDDEN_CHARS: Final[list[str]] = ["\x00", "\n", "\r"]


class PathValidationError(ValueError):
    """Remote path is not usable as a resource identity."""

    pass


def validate_path(path: str) -> str:
    """Validate a remote resource path.

    Args:
        path: Absolute path on the remote host

    Returns:
        The path, unchanged

    Raises:
        PathValidationError: If the path is empty, relative, or contains
            control characters
    """
    if not path:
        raise PathValidationError("Path cannot be empty")

    for char in FORBIDDEN_CHARS:
        if char in path:
            raise PathValidationError(f"Path contains control character: {path!r}")

    if not posixpath.isabs(path):
        raise PathValidationError(f"Path must be absolute: {path}")

    if posixpath.normpath(path) == "/":
        raise PathValidationError("Refusing to manage the root directory")

    return path
