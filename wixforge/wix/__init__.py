"""WiX source generation and toolchain orchestration."""

from wixforge.wix.bundle import VC_REDIST_X64, VC_REDIST_X86, BundleBuilder, Redistributable
from wixforge.wix.compiler import (
    compile_manifest,
    plan_fragments,
    serialize,
    write_manifest_wxs,
)
from wixforge.wix.ids import (
    GUID_NAMESPACE,
    component_group_id,
    component_guid,
    component_id,
    directory_id,
    file_guid,
    file_id,
)
from wixforge.wix.installer import InstallerBuilder
from wixforge.wix.models import ChildDirectory, ComponentEntry, DirectoryFragment
from wixforge.wix.templates import TemplateRenderer, escape_attribute
from wixforge.wix.toolchain import run_candle, run_light, run_stage, target_triple_to_arch

__all__ = [
    "BundleBuilder",
    "ChildDirectory",
    "ComponentEntry",
    "DirectoryFragment",
    "GUID_NAMESPACE",
    "InstallerBuilder",
    "Redistributable",
    "TemplateRenderer",
    "VC_REDIST_X64",
    "VC_REDIST_X86",
    "component_group_id",
    "component_guid",
    "component_id",
    "compile_manifest",
    "directory_id",
    "escape_attribute",
    "file_guid",
    "file_id",
    "plan_fragments",
    "run_candle",
    "run_light",
    "run_stage",
    "serialize",
    "target_triple_to_arch",
    "write_manifest_wxs",
]
