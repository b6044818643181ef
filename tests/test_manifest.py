"""Tests for FileManifest and relative path handling."""

from __future__ import annotations

import os
from pathlib import PurePosixPath

import pytest

from wixforge.errors import IdentifierError
from wixforge.files.manifest import FileContent, FileManifest
from wixforge.files.paths import normalize_path


# ── normalize_path ──────────────────────────────────────────────────


def test_normalize_backslashes():
    assert normalize_path("a\\b\\c.txt") == PurePosixPath("a/b/c.txt")


def test_normalize_strips_dot_segments():
    assert normalize_path("./a/./b.txt") == PurePosixPath("a/b.txt")


@pytest.mark.parametrize("path", ["", ".", "/etc/passwd", "a/../b"])
def test_normalize_rejects(path):
    with pytest.raises(IdentifierError):
        normalize_path(path)


# ── FileManifest ────────────────────────────────────────────────────


class TestFileManifest:
    def test_add_and_contains(self):
        m = FileManifest()
        m.add_file("dir/a.txt", FileContent(b"a"))
        assert "dir/a.txt" in m
        assert "dir\\a.txt" in m
        assert "dir/b.txt" not in m
        assert 42 not in m
        assert len(m) == 1

    def test_add_replaces_existing(self):
        m = FileManifest()
        m.add_file("a.txt", FileContent(b"old"))
        m.add_file("a.txt", FileContent(b"new", executable=True))
        assert len(m) == 1
        [(path, content)] = list(m.entries())
        assert path == PurePosixPath("a.txt")
        assert content == FileContent(b"new", executable=True)

    def test_add_rejects_escaping_path(self):
        m = FileManifest()
        with pytest.raises(IdentifierError):
            m.add_file("../x.txt", FileContent(b""))
        with pytest.raises(IdentifierError):
            m.add_file("/abs.txt", FileContent(b""))

    def test_entries_sorted_by_components(self):
        m = FileManifest()
        for p in ["b.txt", "a/z.txt", "a-b/c.txt", "a/b/c.txt"]:
            m.add_file(p, FileContent(b""))
        paths = [str(p) for p, _ in m.entries()]
        assert paths == ["a/b/c.txt", "a/z.txt", "a-b/c.txt", "b.txt"]


# ── entries_by_directory ────────────────────────────────────────────


class TestEntriesByDirectory:
    def test_sample_layout(self, sample_manifest):
        grouped = sample_manifest.entries_by_directory()
        assert list(grouped) == [
            None,
            PurePosixPath("dir0"),
            PurePosixPath("dir0/child0"),
            PurePosixPath("dir0/child1"),
            PurePosixPath("dir1"),
            PurePosixPath("dir1/child0"),
        ]
        assert list(grouped[None]) == ["root.txt"]
        assert list(grouped[PurePosixPath("dir0")]) == ["dir0_file0.txt"]
        assert list(grouped[PurePosixPath("dir0/child0")]) == ["a.txt", "b.txt"]

    def test_intermediate_directory_has_empty_entry(self, sample_manifest):
        grouped = sample_manifest.entries_by_directory()
        assert grouped[PurePosixPath("dir1")] == {}

    def test_root_always_present(self):
        assert FileManifest().entries_by_directory() == {None: {}}

    def test_root_present_without_root_files(self):
        m = FileManifest()
        m.add_file("deep/nested/file.txt", FileContent(b"x"))
        grouped = m.entries_by_directory()
        assert grouped[None] == {}
        assert PurePosixPath("deep") in grouped
        assert grouped[PurePosixPath("deep/nested")] == {"file.txt": FileContent(b"x")}

    def test_insertion_order_irrelevant(self, sample_manifest):
        reversed_manifest = FileManifest()
        for path, content in reversed(list(sample_manifest.entries())):
            reversed_manifest.add_file(path, content)
        assert reversed_manifest.entries_by_directory() == sample_manifest.entries_by_directory()
        assert list(reversed_manifest.entries_by_directory()) == list(
            sample_manifest.entries_by_directory()
        )


# ── Filesystem round trip ───────────────────────────────────────────


class TestFilesystem:
    def test_add_directory(self, tmp_path):
        src = tmp_path / "src"
        (src / "bin").mkdir(parents=True)
        (src / "bin" / "tool.exe").write_bytes(b"MZ")
        (src / "readme.txt").write_text("hello")

        m = FileManifest()
        assert m.add_directory(src) == 2
        assert "bin/tool.exe" in m
        assert "readme.txt" in m

    def test_add_directory_with_prefix(self, tmp_path):
        (tmp_path / "a.txt").write_text("a")
        m = FileManifest()
        m.add_directory(tmp_path, prefix="share/doc")
        assert "share/doc/a.txt" in m

    def test_add_directory_requires_directory(self, tmp_path):
        f = tmp_path / "file.txt"
        f.write_text("x")
        with pytest.raises(NotADirectoryError):
            FileManifest().add_directory(f)

    def test_write_to_directory(self, sample_manifest, tmp_path):
        dest = tmp_path / "out"
        sample_manifest.write_to_directory(dest)
        assert (dest / "root.txt").read_bytes() == b"root.txt"
        assert (dest / "dir0" / "child1" / "c.txt").read_bytes() == b"dir0/child1/c.txt"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_executable_bit_round_trip(self, tmp_path):
        m = FileManifest()
        m.add_file("bin/run", FileContent(b"#!/bin/sh\n", executable=True))
        m.add_file("data.txt", FileContent(b"plain"))
        m.write_to_directory(tmp_path / "out")

        assert os.access(tmp_path / "out" / "bin" / "run", os.X_OK)

        reloaded = FileManifest()
        reloaded.add_directory(tmp_path / "out")
        contents = dict(reloaded.entries())
        assert contents[PurePosixPath("bin/run")].executable is True
        assert contents[PurePosixPath("data.txt")].executable is False
