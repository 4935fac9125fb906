"""Parsing and validation of space and key identifiers."""

from __future__ import annotations

import re

MAX_IDENTIFIER_SIZE = 256
DELIMITER = "/"

_IDENTIFIER = re.compile(r"[a-z0-9]{1,%d}" % MAX_IDENTIFIER_SIZE)


class InvalidContentsError(ValueError):
    """Raised when a space or key is not made of 1-256 lower-case letters or digits."""

    def __init__(self, message: str = "spaces and keys must be ^[a-z0-9]{1,256}$") -> None:
        super().__init__(message)


class InvalidPathError(ValueError):
    """Raised when a path is not of the form space/key."""

    def __init__(self, message: str = "path is not of the form space/key") -> None:
        super().__init__(message)


def check_contents(identifier: str) -> None:
    """Raise InvalidContentsError if the identifier (space or key) is malformed."""
    if _IDENTIFIER.fullmatch(identifier) is None:
        raise InvalidContentsError()


def resolve_path(path: str) -> tuple[str, str]:
    """Split a "space/key" path into its validated space and key."""
    segments = path.split(DELIMITER)
    if len(segments) != 2:
        raise InvalidPathError()
    space, key = segments
    check_contents(space)
    check_contents(key)
    return space, key