"""CLI entry point for wixforge."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, NoReturn

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from wixforge.config import WixforgeConfig, load_config
from wixforge.config.loader import DEFAULT_CONFIG_TEMPLATE
from wixforge.errors import WixforgeError
from wixforge.files.manifest import FileManifest
from wixforge.log import configure_logging
from wixforge.wix.bundle import BundleBuilder
from wixforge.wix.compiler import write_manifest_wxs
from wixforge.wix.installer import ROOT_DIRECTORY_ID, InstallerBuilder

app = typer.Typer(
    name="wixforge",
    help="Build Windows Installer packages (.msi) and bundles with the WiX Toolset.",
)

config_app = typer.Typer(help="Manage wixforge configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: WixforgeConfig | None = None


def _get_config() -> WixforgeConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to wixforge.yaml")
    ] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="debug | info | warn | error")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    configure_logging(log_level or _config.log_level)


def _parse_defines(items: list[str] | None) -> dict[str, str]:
    """Parse repeated KEY=VALUE options."""
    result: dict[str, str] = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected KEY=VALUE, got {item!r}")
        result[key] = value
    return result


def _parse_variables(items: list[str] | None) -> dict[str, str | None]:
    """Parse repeated KEY[=VALUE] options."""
    result: dict[str, str | None] = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not key:
            raise typer.BadParameter(f"expected KEY[=VALUE], got {item!r}")
        result[key] = value if sep else None
    return result


def _fail(e: Exception) -> NoReturn:
    rprint(f"[red]Error:[/red] {escape(str(e))}")
    raise typer.Exit(1)


@app.command()
def wxs(
    source_dir: Path = typer.Argument(..., help="Directory whose files are installed"),
    out: Path = typer.Option(..., "--out", "-o", help="Output .wxs path"),
    id_prefix: str | None = typer.Option(None, "--id-prefix", help="Prefix for generated ids"),
    root_id: str = typer.Option(
        ROOT_DIRECTORY_ID, "--root-id", help="DirectoryRef id of the install root"
    ),
    install_prefix: Path | None = typer.Option(
        None, "--install-prefix", help="File/@Source prefix (defaults to SOURCE_DIR)"
    ),
) -> None:
    """Generate the fragment .wxs for a directory tree without building."""
    cfg = _get_config()
    manifest = FileManifest()
    try:
        manifest.add_directory(source_dir)
        prefix = install_prefix or source_dir.resolve()
        write_manifest_wxs(
            manifest, out, prefix, root_id, id_prefix or cfg.installer.id_prefix
        )
    except (WixforgeError, OSError) as e:
        _fail(e)

    directories = [d for d in manifest.entries_by_directory() if d is not None]
    table = Table(title=f"Generated {out}")
    table.add_column("Directories", justify="right")
    table.add_column("Files", justify="right")
    table.add_row(str(len(directories)), str(len(manifest)))
    rprint(table)


@app.command()
def msi(
    source_dir: Path = typer.Argument(..., help="Directory whose files are installed"),
    out: Path = typer.Option(..., "--out", "-o", help="Output .msi path"),
    name: str | None = typer.Option(None, "--name", help="Product name"),
    version: str | None = typer.Option(None, "--version", help="Product version"),
    manufacturer: str | None = typer.Option(None, "--manufacturer", help="Manufacturer"),
    id_prefix: str | None = typer.Option(None, "--id-prefix", help="Prefix for generated ids"),
    target: str | None = typer.Option(None, "--target", help="Target triple"),
    build_dir: Path | None = typer.Option(None, "--build-dir", help="Working directory"),
    extra_wxs: list[Path] | None = typer.Option(
        None, "--wxs", help="Additional .wxs file (repeatable)"
    ),
    define: list[str] | None = typer.Option(
        None, "--define", "-D", help="candle preprocessor KEY=VALUE (repeatable)"
    ),
    variable: list[str] | None = typer.Option(
        None, "--var", "-V", help="light variable KEY[=VALUE] (repeatable)"
    ),
    default_wxs: bool | None = typer.Option(
        None, "--default-wxs/--no-default-wxs", help="Include the builtin main.wxs"
    ),
) -> None:
    """Build an .msi installer from a directory tree."""
    cfg = _get_config()
    icfg = cfg.installer

    builder = InstallerBuilder(target or icfg.target_triple, toolset=cfg.toolset)
    try:
        builder.add_install_directory(source_dir)
        for path in [*map(Path, icfg.extra_wxs), *(extra_wxs or [])]:
            builder.add_definition_fragment_from_file(path)
        use_default = default_wxs if default_wxs is not None else icfg.default_wxs
        if use_default:
            builder.add_default_fragment(
                name or icfg.product_name,
                version or icfg.version,
                manufacturer or icfg.manufacturer,
            )
        for key, value in {**icfg.preprocessor, **_parse_defines(define)}.items():
            builder.set_preprocessor_parameter(key, value)
        for key, var in {**icfg.variables, **_parse_variables(variable)}.items():
            builder.set_variable(key, var)

        rprint(f"[bold]Building[/bold] {out} ({len(builder.install_files)} files)...")
        builder.build(
            build_dir or Path(cfg.build_dir),
            id_prefix or icfg.id_prefix,
            out,
        )
    except (WixforgeError, OSError) as e:
        _fail(e)

    rprint(f"[green]Built[/green] {out}")


@app.command()
def bundle(
    out: Path = typer.Option(..., "--out", "-o", help="Output .exe path"),
    name: str | None = typer.Option(None, "--name", help="Bundle name"),
    version: str | None = typer.Option(None, "--version", help="Bundle version"),
    manufacturer: str | None = typer.Option(None, "--manufacturer", help="Manufacturer"),
    upgrade_code: str | None = typer.Option(None, "--upgrade-code", help="Explicit UpgradeCode"),
    vc_redist_x86: bool | None = typer.Option(
        None, "--vc-redist-x86/--no-vc-redist-x86", help="Chain the x86 VC++ redistributable"
    ),
    vc_redist_x64: bool | None = typer.Option(
        None, "--vc-redist-x64/--no-vc-redist-x64", help="Chain the x64 VC++ redistributable"
    ),
    build_dir: Path | None = typer.Option(None, "--build-dir", help="Working directory"),
    define: list[str] | None = typer.Option(
        None, "--define", "-D", help="candle preprocessor KEY=VALUE (repeatable)"
    ),
    variable: list[str] | None = typer.Option(
        None, "--var", "-V", help="light variable KEY[=VALUE] (repeatable)"
    ),
) -> None:
    """Build a bundle .exe chaining optional redistributables."""
    cfg = _get_config()
    bcfg = cfg.bundle

    builder = BundleBuilder(
        name or bcfg.name,
        version or bcfg.version,
        manufacturer or bcfg.manufacturer,
        toolset=cfg.toolset,
    )
    builder.upgrade_code_override = upgrade_code or bcfg.upgrade_code
    builder.include_vc_redist_x86 = (
        vc_redist_x86 if vc_redist_x86 is not None else bcfg.include_vc_redist_x86
    )
    builder.include_vc_redist_x64 = (
        vc_redist_x64 if vc_redist_x64 is not None else bcfg.include_vc_redist_x64
    )
    for key, value in _parse_defines(define).items():
        builder.set_preprocessor_parameter(key, value)
    for key, var in _parse_variables(variable).items():
        builder.set_variable(key, var)

    rprint(f"[bold]Building bundle[/bold] {out}...")
    try:
        builder.build(build_dir or Path(cfg.build_dir), out)
    except (WixforgeError, OSError) as e:
        _fail(e)

    rprint(f"[green]Built[/green] {out}")


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default wixforge.yaml in current directory."""
    target = Path("wixforge.yaml")
    if target.exists() and not force:
        rprint("[yellow]wixforge.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
