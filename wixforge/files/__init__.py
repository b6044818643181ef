"""File manifests and remote file acquisition."""

from wixforge.files.fetch import (
    ensure_toolset,
    extract_zip,
    fetch_and_verify,
    fetch_to_file,
)
from wixforge.files.manifest import FileContent, FileManifest
from wixforge.files.paths import normalize_path

__all__ = [
    "FileContent",
    "FileManifest",
    "ensure_toolset",
    "extract_zip",
    "fetch_and_verify",
    "fetch_to_file",
    "normalize_path",
]
