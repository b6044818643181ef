"""Deterministic WiX identifiers and GUIDs derived from install paths.

Every value produced here is a pure function of ``(prefix, path)``. The
namespace string and the composition of the hashed keys are part of the
on-disk contract: installed products detect upgrades by comparing component
GUIDs, so changing either breaks upgrades of existing installs.
"""

from __future__ import annotations

import re
import uuid
from pathlib import PurePath

from wixforge.errors import IdentifierError
from wixforge.files.paths import normalize_path

GUID_NAMESPACE = "https://github.com/indygreg/PyOxidizer/tugger/wix"

_ID_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_.\-]*", re.ASCII)


def validate_identifier(value: str) -> str:
    """Return *value* unchanged if it is a usable identifier, else raise."""
    if not _ID_RE.fullmatch(value):
        raise IdentifierError(f"invalid WiX identifier: {value!r}")
    return value


def _flatten(path: str | PurePath) -> str:
    return str(normalize_path(path)).replace("/", ".").replace("-", "_")


def _guid(prefix: str, kind: str, name: str) -> str:
    key = f"{GUID_NAMESPACE}/{prefix}/{kind}/{name}"
    return str(uuid.uuid5(uuid.NAMESPACE_URL, key)).upper()


def directory_id(prefix: str, path: str | PurePath) -> str:
    """``<prefix>.dir.<path>`` with ``/`` -> ``.`` and ``-`` -> ``_``."""
    return validate_identifier(f"{prefix}.dir.{_flatten(path)}")


def component_guid(prefix: str, path: str | PurePath) -> str:
    """Upper-case hyphenated v5 UUID for the component owning *path*."""
    return _guid(prefix, "component", str(normalize_path(path)))


def component_id(prefix: str, path: str | PurePath) -> str:
    guid = component_guid(prefix, path)
    return validate_identifier(f"{prefix}.component.{guid.lower()}")


def file_guid(prefix: str, filename: str) -> str:
    """Like :func:`component_guid` but keyed on the bare file name.

    File ids only need to be unique inside their directory fragment, so the
    directory part of the path is intentionally not hashed.
    """
    if not filename or "/" in filename or "\\" in filename:
        raise IdentifierError(f"expected a bare file name, got {filename!r}")
    return _guid(prefix, "file", filename)


def file_id(prefix: str, filename: str) -> str:
    guid = file_guid(prefix, filename)
    return validate_identifier(f"{prefix}.file.{guid.lower().replace('-', '_')}")


def component_group_id(prefix: str, path: str | PurePath) -> str:
    return validate_identifier(f"{prefix}.group.{_flatten(path)}")
