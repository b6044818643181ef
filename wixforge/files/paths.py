"""Relative install-path normalization."""

from __future__ import annotations

from pathlib import PurePath, PurePosixPath

from wixforge.errors import IdentifierError


def normalize_path(path: str | PurePath) -> PurePosixPath:
    """Convert *path* to a relative forward-slash path.

    Raises IdentifierError for empty, absolute or parent-escaping paths.
    """
    if isinstance(path, PurePath):
        parts = path.parts
        absolute = path.is_absolute() or bool(path.anchor)
    else:
        posix = PurePosixPath(path.replace("\\", "/"))
        parts = posix.parts
        absolute = posix.is_absolute()

    if absolute:
        raise IdentifierError(f"install path must be relative: {str(path)!r}")
    if not parts:
        raise IdentifierError("install path must not be empty")
    if ".." in parts:
        raise IdentifierError(f"install path must not contain '..': {str(path)!r}")
    return PurePosixPath(*parts)
