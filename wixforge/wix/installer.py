"""Build ``.msi`` installers from a file manifest and ``.wxs`` sources."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path, PurePath

from wixforge.config.models import ToolsetConfig
from wixforge.errors import ConfigurationError
from wixforge.files.fetch import ensure_toolset
from wixforge.files.manifest import FileContent, FileManifest
from wixforge.wix.compiler import compile_manifest, serialize
from wixforge.wix.ids import component_group_id, validate_identifier
from wixforge.wix.templates import MAIN_TEMPLATE, TemplateRenderer, escape_attribute
from wixforge.wix.toolchain import run_candle, run_light, target_triple_to_arch

logger = logging.getLogger(__name__)

ROOT_DIRECTORY_ID = "ROOT"
GENERATED_WXS_NAME = "install_files.wxs"
# Preprocessor variable the builtin main.wxs uses to reference the
# generated root component group.
FILES_GROUP_VARIABLE = "InstallFilesGroup"


class InstallerBuilder:
    """Accumulates installer configuration, then builds an ``.msi``.

    Configure with the setters and ``add_*`` methods, then call
    :meth:`build`. ``build`` writes into a build directory but leaves the
    builder itself untouched, so it can be called again.
    """

    def __init__(
        self,
        target_triple: str,
        *,
        renderer: TemplateRenderer | None = None,
        toolset: ToolsetConfig | None = None,
    ) -> None:
        self.target_triple = target_triple
        self.install_files = FileManifest()
        self.preprocessor_parameters: dict[str, str] = {}
        self.variables: dict[str, str | None] = {}
        self.wxs_files = FileManifest()
        self.renderer = renderer or TemplateRenderer()
        self.toolset = toolset or ToolsetConfig()

    # -- configuration -----------------------------------------------------

    def set_preprocessor_parameter(self, key: str, value: str) -> None:
        """Define ``-d<key>=<value>`` for every candle invocation."""
        self.preprocessor_parameters[key] = value

    def set_variable(self, key: str, value: str | None = None) -> None:
        """Define ``-d<key>[=<value>]`` for the light invocation."""
        self.variables[key] = value

    def add_install_file(self, path: str | PurePath, content: FileContent) -> None:
        self.install_files.add_file(path, content)

    def add_install_directory(self, root: Path) -> int:
        return self.install_files.add_directory(root)

    def add_definition_fragment_from_bytes(self, path: str | PurePath, data: bytes) -> None:
        """Register ``.wxs`` content to be materialized at *path* when building."""
        self.wxs_files.add_file(path, FileContent(data=data))

    def add_definition_fragment_from_file(self, path: Path) -> None:
        """Register a ``.wxs`` file from disk, staged under its own file name.

        Use :meth:`add_definition_fragment_from_bytes` to control the
        staged location explicitly.
        """
        name = Path(path).name
        if not name or name in (".", ".."):
            raise ConfigurationError(f"could not resolve file name of {str(path)!r}")
        self.wxs_files.add_file(name, FileContent.from_path(Path(path)))

    def add_default_fragment(self, product_name: str, version: str, manufacturer: str) -> None:
        """Register the builtin ``main.wxs`` describing a simple product."""
        data = {
            "product_name": escape_attribute(product_name),
            "version": escape_attribute(version),
            "manufacturer": escape_attribute(manufacturer),
            "upgrade_code": escape_attribute(self.upgrade_code(product_name)),
        }
        content = self.renderer.render(MAIN_TEMPLATE, data)
        self.add_definition_fragment_from_bytes("main.wxs", content.encode("utf-8"))

    def upgrade_code(self, product_name: str) -> str:
        """Stable per-product, per-target UpgradeCode."""
        return str(
            uuid.uuid5(
                uuid.NAMESPACE_DNS,
                f"tugger.installer.{product_name}.{self.target_triple}",
            )
        )

    @property
    def arch(self) -> str:
        return target_triple_to_arch(self.target_triple)

    # -- build -------------------------------------------------------------

    def build(
        self,
        build_path: Path,
        id_prefix: str,
        output_path: Path,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> Path:
        """Produce an ``.msi`` at *output_path*.

        Layout under *build_path*::

            wix-toolset/        extracted WiX binaries
            staged_files/       install files, referenced by File/@Source
            wxs/                registered .wxs files + install_files.wxs

        Intermediate files are left in place when a stage fails.
        """
        validate_identifier(id_prefix)
        if GENERATED_WXS_NAME in self.wxs_files:
            raise ConfigurationError(f"{GENERATED_WXS_NAME} is reserved for generated content")
        build_path = Path(build_path).resolve()
        output_path = Path(output_path).resolve()
        stage_path = build_path / "staged_files"
        wxs_path = build_path / "wxs"

        # Path defects surface here, before anything is fetched or written.
        files_document = serialize(
            compile_manifest(self.install_files, stage_path, ROOT_DIRECTORY_ID, id_prefix)
        )

        toolset_path = ensure_toolset(build_path / self.toolset.directory_name, self.toolset)

        self.install_files.write_to_directory(stage_path)
        self.wxs_files.write_to_directory(wxs_path)

        files_wxs = wxs_path / GENERATED_WXS_NAME
        files_wxs.write_bytes(files_document)
        logger.info("wrote %s (%d files)", files_wxs, len(self.install_files))

        all_wxs = [wxs_path.joinpath(*p.parts) for p, _ in self.wxs_files.entries()]
        all_wxs.append(files_wxs)

        defines = {FILES_GROUP_VARIABLE: component_group_id(id_prefix, ROOT_DIRECTORY_ID)}
        defines.update(self.preprocessor_parameters)

        wixobjs = [
            run_candle(toolset_path, p, self.arch, defines, log=log) for p in all_wxs
        ]

        output_path.parent.mkdir(parents=True, exist_ok=True)
        # A stale artifact from an earlier build must not survive a failed link.
        output_path.unlink(missing_ok=True)
        run_light(toolset_path, build_path, wixobjs, self.variables, output_path, log=log)
        logger.info("built %s", output_path)
        return output_path
