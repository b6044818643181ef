"""Invoke the WiX compiler (candle) and linker (light)."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from wixforge.errors import ConfigurationError, ToolchainError

logger = logging.getLogger(__name__)

_CANDLE_EXTENSIONS = ("WixBalExtension", "WixUtilExtension")
_LIGHT_EXTENSIONS = ("WixUIExtension", "WixBalExtension", "WixUtilExtension")


def target_triple_to_arch(triple: str) -> str:
    """Map a target triple to the value of candle's ``-arch`` flag."""
    if "x86_64" in triple or "amd64" in triple:
        return "x64"
    return "x86"


def run_stage(
    stage: str,
    tool_path: Path,
    args: Sequence[str],
    cwd: Path,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> None:
    """Run one toolchain process, streaming its combined output to *log*.

    stdout and stderr are merged and each line is logged as soon as it is
    read. Raises ToolchainError on a nonzero exit or if the process could
    not be started. The child is always reaped before returning.
    """
    log = log or logger
    cmd = [str(tool_path), *args]
    log.debug("running %s in %s: %s", stage, cwd, cmd)

    try:
        proc = subprocess.Popen(
            cmd,
            cwd=str(cwd),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            errors="replace",
        )
    except OSError as e:
        raise ToolchainError(stage, None, e) from e

    with proc:
        try:
            for line in proc.stdout or ():
                log.info("%s", line.rstrip("\r\n"))
        except BaseException:
            proc.kill()
            raise
        returncode = proc.wait()

    if returncode != 0:
        raise ToolchainError(stage, returncode)


def candle_args(
    wxs_name: str,
    arch: str,
    defines: Iterable[tuple[str, str]] = (),
    output_path: Path | None = None,
) -> list[str]:
    args = ["-nologo"]
    for ext in _CANDLE_EXTENSIONS:
        args.extend(["-ext", ext])
    args.extend(["-arch", arch])
    for key, value in defines:
        args.append(f"-d{key}={value}")
    if output_path is not None:
        args.extend(["-out", str(output_path)])
    args.append(wxs_name)
    return args


def light_args(
    wixobjs: Iterable[Path],
    variables: Iterable[tuple[str, str | None]],
    output_path: Path,
) -> list[str]:
    args = ["-nologo"]
    for ext in _LIGHT_EXTENSIONS:
        args.extend(["-ext", ext])
    args.extend(["-out", str(output_path)])
    for key, value in variables:
        args.append(f"-d{key}" if value is None else f"-d{key}={value}")
    args.extend(str(p) for p in wixobjs)
    return args


def run_candle(
    toolset_path: Path,
    wxs_path: Path,
    arch: str,
    defines: Mapping[str, str] | Iterable[tuple[str, str]] = (),
    output_path: Path | None = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> Path:
    """Compile *wxs_path* to a ``.wixobj`` and return the object's path.

    candle runs inside the source file's directory so relative references in
    the source resolve the same way they would for a hand-run build. Without
    *output_path* the object lands beside the source.
    """
    if not wxs_path.name:
        raise ConfigurationError(f"unable to resolve file name of {wxs_path}")
    if isinstance(defines, Mapping):
        defines = defines.items()

    (log or logger).warning("running candle for %s", wxs_path)
    run_stage(
        "candle",
        toolset_path / "candle.exe",
        candle_args(wxs_path.name, arch, defines, output_path),
        wxs_path.parent,
        log,
    )
    return output_path if output_path is not None else wxs_path.with_suffix(".wixobj")


def run_light(
    toolset_path: Path,
    build_path: Path,
    wixobjs: Iterable[Path],
    variables: Mapping[str, str | None] | Iterable[tuple[str, str | None]],
    output_path: Path,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> None:
    """Link *wixobjs* into *output_path* (an ``.msi`` or bundle ``.exe``)."""
    if isinstance(variables, Mapping):
        variables = variables.items()

    (log or logger).warning("running light")
    run_stage(
        "light",
        toolset_path / "light.exe",
        light_args(wixobjs, variables, output_path),
        build_path,
        log,
    )
