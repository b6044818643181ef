"""Shared test fixtures for wixforge."""

from __future__ import annotations

from pathlib import Path

import pytest

from wixforge.files.manifest import FileContent, FileManifest

SAMPLE_PATHS = [
    "root.txt",
    "dir0/dir0_file0.txt",
    "dir0/child0/a.txt",
    "dir0/child0/b.txt",
    "dir0/child1/c.txt",
    "dir1/child0/d.txt",
]

# Stand-ins for the WiX binaries. They record "<cwd>|<args>" to a .calls
# file next to themselves so tests can inspect invocations.
FAKE_CANDLE = """\
#!/bin/sh
here=$(dirname "$0")
echo "$PWD|$*" >> "$here/candle.calls"
for last in "$@"; do :; done
echo "candle: compiling $last"
echo "candle: diagnostic on stderr" >&2
cp "$last" "${last%.wxs}.wixobj"
"""

FAKE_LIGHT = """\
#!/bin/sh
here=$(dirname "$0")
echo "$PWD|$*" >> "$here/light.calls"
out=""
while [ $# -gt 0 ]; do
  case "$1" in
    -out) out="$2"; shift ;;
  esac
  shift
done
echo "light: linking $out"
printf 'linked' > "$out"
"""

FAKE_FAILING = """\
#!/bin/sh
echo "error WIX0001 : something went wrong"
exit 2
"""


def _write_script(path: Path, body: str) -> None:
    path.write_text(body)
    path.chmod(0o755)


@pytest.fixture
def sample_manifest():
    """Six files spread over nested directories, including one at the root."""
    manifest = FileManifest()
    for p in SAMPLE_PATHS:
        manifest.add_file(p, FileContent(data=p.encode()))
    return manifest


@pytest.fixture
def fake_toolset():
    """Factory placing fake candle.exe/light.exe under ``<build>/wix-toolset``.

    ``fail`` names a stage ("candle" or "light") whose binary exits nonzero.
    """

    def _make(build_dir: Path, fail: str | None = None) -> Path:
        toolset = build_dir / "wix-toolset"
        toolset.mkdir(parents=True, exist_ok=True)
        _write_script(toolset / "candle.exe", FAKE_FAILING if fail == "candle" else FAKE_CANDLE)
        _write_script(toolset / "light.exe", FAKE_FAILING if fail == "light" else FAKE_LIGHT)
        return toolset

    return _make


def read_calls(toolset: Path, stage: str) -> list[tuple[str, str]]:
    """Parse the ``(cwd, args)`` pairs a fake binary recorded."""
    calls_file = toolset / f"{stage}.calls"
    if not calls_file.exists():
        return []
    calls = []
    for line in calls_file.read_text().splitlines():
        cwd, _, args = line.partition("|")
        calls.append((cwd, args))
    return calls


@pytest.fixture
def toolset_calls():
    return read_calls
