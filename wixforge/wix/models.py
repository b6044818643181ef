"""Data models for generated WiX fragments."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

WIX_NAMESPACE = "http://schemas.microsoft.com/wix/2006/wi"
BAL_NAMESPACE = "http://schemas.microsoft.com/wix/BalExtension"
UTIL_NAMESPACE = "http://schemas.microsoft.com/wix/UtilExtension"


@dataclass(frozen=True)
class ChildDirectory:
    """A ``<Directory>`` declared inside its parent's ``<DirectoryRef>``."""

    id: str
    name: str


@dataclass(frozen=True)
class ComponentEntry:
    """One ``<Component>`` wrapping exactly one key-path ``<File>``."""

    path: PurePosixPath
    id: str
    guid: str
    file_id: str
    source: str


@dataclass(frozen=True)
class DirectoryFragment:
    """Everything emitted for a single directory of the install manifest.

    ``directory`` is ``None`` for the install root.
    """

    directory: PurePosixPath | None
    ref_id: str
    children: tuple[ChildDirectory, ...] = ()
    components: tuple[ComponentEntry, ...] = ()
    group_id: str = ""
    group_members: tuple[str, ...] = ()
