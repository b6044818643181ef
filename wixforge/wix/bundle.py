"""Build WiX bundle installers (bootstrapper ``.exe`` chaining packages)."""

from __future__ import annotations

import logging
import uuid
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

from wixforge.config.models import ToolsetConfig
from wixforge.files.fetch import ensure_toolset, fetch_to_file
from wixforge.wix.compiler import serialize
from wixforge.wix.models import BAL_NAMESPACE, UTIL_NAMESPACE, WIX_NAMESPACE
from wixforge.wix.toolchain import run_candle, run_light

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Redistributable:
    """A third-party installer chained into a bundle as an ``<ExePackage>``."""

    filename: str
    url: str
    sha256: str
    install_condition: str
    description: str


VC_REDIST_X86 = Redistributable(
    filename="vc_redist.x86.exe",
    url=(
        "https://download.visualstudio.microsoft.com/download/pr/"
        "c8edbb87-c7ec-4500-a461-71e8912d25e9/99ba493d660597490cbb8b3211d2cae4/vc_redist.x86.exe"
    ),
    sha256="3a43e8a55a3f3e4b73d01872c16d47a19dd825756784f4580187309e7d1fcb74",
    install_condition="Not VersionNT64",
    description="Visual C++ Redistributable (x86)",
)

VC_REDIST_X64 = Redistributable(
    filename="vc_redist.x64.exe",
    url=(
        "https://download.visualstudio.microsoft.com/download/pr/"
        "9e04d214-5a9d-4515-9960-3d71398d98c3/1e1e62ab57bbb4bf5199e8ce88f040be/vc_redist.x64.exe"
    ),
    sha256="d6cd2445f68815fe02489fafe0127819e44851e26dfbe702612bc0d223cbbc2b",
    install_condition="VersionNT64",
    description="Visual C++ Redistributable (x64)",
)

# The bundle shell itself is always compiled as a 64-bit bootstrapper.
BUNDLE_ARCH = "x64"


class BundleBuilder:
    """Accumulates bundle configuration, then builds a bootstrapper ``.exe``."""

    def __init__(
        self,
        name: str,
        version: str,
        manufacturer: str,
        *,
        toolset: ToolsetConfig | None = None,
    ) -> None:
        self.name = name
        self.version = version
        self.manufacturer = manufacturer
        self.upgrade_code_override: str | None = None
        self.include_vc_redist_x86 = False
        self.include_vc_redist_x64 = False
        self.preprocessor_parameters: dict[str, str] = {}
        self.variables: dict[str, str | None] = {}
        self.toolset = toolset or ToolsetConfig()

    def set_preprocessor_parameter(self, key: str, value: str) -> None:
        self.preprocessor_parameters[key] = value

    def set_variable(self, key: str, value: str | None = None) -> None:
        self.variables[key] = value

    @property
    def upgrade_code(self) -> str:
        """Explicit override, else derived from the bundle name."""
        if self.upgrade_code_override:
            return self.upgrade_code_override
        return str(uuid.uuid5(uuid.NAMESPACE_DNS, f"tugger.bundle.{self.name}"))

    def redistributables(self) -> list[Redistributable]:
        redists = []
        if self.include_vc_redist_x86:
            redists.append(VC_REDIST_X86)
        if self.include_vc_redist_x64:
            redists.append(VC_REDIST_X64)
        return redists

    def bundle_element(self) -> ET.Element:
        """The ``<Wix>`` document describing this bundle."""
        root = ET.Element(
            "Wix",
            {
                "xmlns": WIX_NAMESPACE,
                "xmlns:bal": BAL_NAMESPACE,
                "xmlns:util": UTIL_NAMESPACE,
            },
        )
        bundle = ET.SubElement(
            root,
            "Bundle",
            {
                "Name": self.name,
                "Version": self.version,
                "Manufacturer": self.manufacturer,
                "UpgradeCode": self.upgrade_code,
            },
        )
        ba_ref = ET.SubElement(
            bundle,
            "BootstrapperApplicationRef",
            {"Id": "WixStandardBootstrapperApplication.HyperlinkLicense"},
        )
        ET.SubElement(
            ba_ref,
            "bal:WixStandardBootstrapperApplication",
            {"LicenseUrl": "", "SuppressOptionsUI": "yes"},
        )

        chain = ET.SubElement(bundle, "Chain")
        for redist in self.redistributables():
            ET.SubElement(
                chain,
                "ExePackage",
                {
                    "Id": redist.filename,
                    "SourceFile": redist.filename,
                    "Cache": "no",
                    "Compressed": "yes",
                    "PerMachine": "yes",
                    "Permanent": "yes",
                    "InstallCondition": redist.install_condition,
                    "InstallCommand": "/install /quiet /norestart",
                    "RepairCommand": "/repair /quiet /norestart",
                    "UninstallCommand": "/uninstall /quiet /norestart",
                },
            )
        return root

    def build(
        self,
        build_path: Path,
        output_path: Path,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> Path:
        """Produce the bundle executable at *output_path*.

        Redistributables already present in *build_path* are reused as-is.
        """
        build_path = Path(build_path).resolve()
        output_path = Path(output_path).resolve()
        build_path.mkdir(parents=True, exist_ok=True)

        toolset_path = ensure_toolset(build_path / self.toolset.directory_name, self.toolset)

        for redist in self.redistributables():
            dest = build_path / redist.filename
            if not dest.exists():
                logger.warning("fetching %s", redist.description)
            fetch_to_file(redist.url, redist.sha256, dest)

        bundle_wxs = build_path / "bundle.wxs"
        bundle_wxs.write_bytes(serialize(self.bundle_element()))

        wixobj = run_candle(
            toolset_path, bundle_wxs, BUNDLE_ARCH, self.preprocessor_parameters, log=log
        )

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.unlink(missing_ok=True)
        run_light(toolset_path, build_path, [wixobj], self.variables, output_path, log=log)
        logger.info("built %s", output_path)
        return output_path
