from pydantic import BaseModel, Field
from typing import Literal

WIX_TOOLSET_URL = (
    "https://github.com/wixtoolset/wix3/releases/download/wix3112rtm/wix311-binaries.zip"
)
WIX_TOOLSET_SHA256 = "2c1888d5d1dba377fc7fa14444cf556963747ff9a0a289a3599cf09da03b9e2e"


class ToolsetConfig(BaseModel):
    url: str = WIX_TOOLSET_URL
    sha256: str = Field(default=WIX_TOOLSET_SHA256, pattern=r"^[0-9a-fA-F]{64}$")
    directory_name: str = "wix-toolset"
    timeout: float = Field(default=300.0, gt=0)


class InstallerConfig(BaseModel):
    product_name: str = "app"
    version: str = "0.1.0"
    manufacturer: str = "Unknown"
    id_prefix: str = Field(default="app", pattern=r"^[A-Za-z_][A-Za-z0-9_.]*$")
    target_triple: str = "x86_64-pc-windows-msvc"
    preprocessor: dict[str, str] = Field(default_factory=dict)
    variables: dict[str, str | None] = Field(default_factory=dict)
    extra_wxs: list[str] = Field(default_factory=list)
    default_wxs: bool = True


class BundleConfig(BaseModel):
    name: str = "app"
    version: str = "0.1.0"
    manufacturer: str = "Unknown"
    upgrade_code: str | None = None
    include_vc_redist_x86: bool = False
    include_vc_redist_x64: bool = False


class WixforgeConfig(BaseModel):
    toolset: ToolsetConfig = Field(default_factory=ToolsetConfig)
    installer: InstallerConfig = Field(default_factory=InstallerConfig)
    bundle: BundleConfig = Field(default_factory=BundleConfig)
    build_dir: str = "build/wixforge"
    log_level: Literal["debug", "info", "warn", "error"] = "info"
