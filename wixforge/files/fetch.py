"""Download-and-verify helpers for the WiX toolset and redistributables."""

from __future__ import annotations

import hashlib
import io
import logging
import zipfile
from pathlib import Path

import httpx

from wixforge.config.models import ToolsetConfig
from wixforge.errors import FetchError, IntegrityError

logger = logging.getLogger(__name__)

TOOLSET_EXECUTABLES = ("candle.exe", "light.exe")


def fetch_and_verify(
    url: str,
    sha256: str,
    *,
    client: httpx.Client | None = None,
    timeout: float = 300.0,
) -> bytes:
    """Download *url* and return its bytes if they hash to *sha256*.

    No retries are attempted; callers decide whether a failure is fatal.
    """
    logger.info("fetching %s", url)
    owns_client = client is None
    if client is None:
        client = httpx.Client(follow_redirects=True, timeout=timeout)
    try:
        resp = client.get(url)
        resp.raise_for_status()
        data = resp.content
    except httpx.HTTPStatusError as e:
        raise FetchError(url, f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise FetchError(url, str(e)) from e
    finally:
        if owns_client:
            client.close()

    actual = hashlib.sha256(data).hexdigest()
    if actual != sha256.lower():
        raise IntegrityError(url, sha256.lower(), actual)
    logger.debug("verified %s (%d bytes)", url, len(data))
    return data


def extract_zip(data: bytes, dest: Path) -> None:
    """Extract a zip archive held in memory into *dest*.

    Members are written in sorted order; members that would land outside
    *dest* are rejected.
    """
    dest.mkdir(parents=True, exist_ok=True)
    root = dest.resolve()
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        for name in sorted(zf.namelist()):
            target = (root / name).resolve()
            if not target.is_relative_to(root):
                raise ValueError(f"archive member escapes destination: {name!r}")
            if name.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(zf.read(name))


def toolset_present(path: Path) -> bool:
    return all((path / exe).is_file() for exe in TOOLSET_EXECUTABLES)


def ensure_toolset(
    path: Path,
    config: ToolsetConfig | None = None,
    *,
    client: httpx.Client | None = None,
) -> Path:
    """Make sure the WiX binaries exist in *path*, downloading them if not."""
    if toolset_present(path):
        logger.debug("using WiX toolset at %s", path)
        return path

    config = config or ToolsetConfig()
    logger.warning("downloading WiX Toolset...")
    data = fetch_and_verify(config.url, config.sha256, client=client, timeout=config.timeout)
    logger.warning("extracting WiX...")
    extract_zip(data, path)
    return path


def fetch_to_file(
    url: str,
    sha256: str,
    dest: Path,
    *,
    client: httpx.Client | None = None,
) -> Path:
    """Download to *dest* unless it already exists. Existing files are trusted."""
    if dest.exists():
        logger.debug("using cached %s", dest)
        return dest
    data = fetch_and_verify(url, sha256, client=client)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(data)
    return dest
