"""In-memory manifest of files to install, keyed by relative path."""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path, PurePath, PurePosixPath

from wixforge.files.paths import normalize_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileContent:
    """Bytes of a file plus whether it should be installed executable."""

    data: bytes
    executable: bool = False

    @classmethod
    def from_path(cls, path: Path) -> FileContent:
        data = path.read_bytes()
        mode = path.stat().st_mode
        return cls(data=data, executable=bool(mode & stat.S_IXUSR))


def _sort_key(path: PurePosixPath) -> tuple[str, ...]:
    return path.parts


class FileManifest:
    """Ordered mapping of relative install path -> :class:`FileContent`.

    Iteration is always in path-component order, so two manifests holding
    the same files produce the same output regardless of insertion order.
    """

    def __init__(self) -> None:
        self._files: dict[PurePosixPath, FileContent] = {}

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, PurePath)):
            return False
        return normalize_path(path) in self._files

    def add_file(self, path: str | PurePath, content: FileContent) -> None:
        """Register *content* at *path*, replacing any previous entry."""
        self._files[normalize_path(path)] = content

    def add_directory(self, root: Path, prefix: str | PurePath | None = None) -> int:
        """Add every regular file under *root*. Returns the number added.

        Files land at their path relative to *root*, optionally nested
        under *prefix*.
        """
        root = root.resolve()
        if not root.is_dir():
            raise NotADirectoryError(f"not a directory: {root}")

        count = 0
        for p in sorted(root.rglob("*")):
            if not p.is_file():
                continue
            rel = PurePosixPath(*p.relative_to(root).parts)
            if prefix is not None:
                rel = normalize_path(prefix) / rel
            self.add_file(rel, FileContent.from_path(p))
            count += 1
        logger.debug("added %d files from %s", count, root)
        return count

    def entries(self) -> Iterator[tuple[PurePosixPath, FileContent]]:
        for path in sorted(self._files, key=_sort_key):
            yield path, self._files[path]

    def entries_by_directory(
        self,
    ) -> dict[PurePosixPath | None, dict[str, FileContent]]:
        """Group files by containing directory.

        The root is keyed ``None`` and is always present. Every directory
        implied by a file path appears, including intermediate directories
        that hold no files directly (their value is an empty dict).
        """
        grouped: dict[PurePosixPath | None, dict[str, FileContent]] = {None: {}}

        for path, content in self.entries():
            parent = path.parent
            directory = None if parent == PurePosixPath(".") else parent
            grouped.setdefault(directory, {})[path.name] = content

            # Register every ancestor so intermediate dirs get a fragment.
            cur = directory
            while cur is not None:
                grouped.setdefault(cur, {})
                up = cur.parent
                cur = None if up == PurePosixPath(".") else up

        def _key(d: PurePosixPath | None) -> tuple[int, tuple[str, ...]]:
            return (0, ()) if d is None else (1, d.parts)

        return {
            d: dict(sorted(grouped[d].items())) for d in sorted(grouped, key=_key)
        }

    def write_to_directory(self, dest: Path) -> None:
        """Materialize every file under *dest*.

        Executable entries get mode 0o755 where the platform has one.
        """
        dest.mkdir(parents=True, exist_ok=True)
        for rel, content in self.entries():
            target = dest.joinpath(*rel.parts)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content.data)
            if content.executable and os.name != "nt":
                target.chmod(0o755)
        logger.debug("wrote %d files to %s", len(self._files), dest)
