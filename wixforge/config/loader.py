"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import WixforgeConfig


def load_config(cli_path: str | None = None) -> WixforgeConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./wixforge.yaml"),
        Path.home() / ".wixforge" / "config.yaml",
    ]

    if cli_path and not Path(cli_path).exists():
        raise ValueError(f"Config file not found: {cli_path}")

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return WixforgeConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e
            except TypeError as e:
                raise ValueError(f"Invalid config in {path}: expected a mapping") from e

    return WixforgeConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `wixforge config init`
DEFAULT_CONFIG_TEMPLATE = """\
# wixforge.yaml

# WiX Toolset (downloaded and verified on first build)
toolset:
  url: "https://github.com/wixtoolset/wix3/releases/download/wix3112rtm/wix311-binaries.zip"
  sha256: "2c1888d5d1dba377fc7fa14444cf556963747ff9a0a289a3599cf09da03b9e2e"
  directory_name: "wix-toolset"

# MSI installer
installer:
  product_name: "myapp"
  version: "0.1.0"
  manufacturer: "${USER}"
  id_prefix: "myapp"
  target_triple: "x86_64-pc-windows-msvc"
  default_wxs: true            # add the builtin main.wxs
  # extra_wxs: [installer/shortcuts.wxs]
  # preprocessor:
  #   Channel: "stable"
  # variables:
  #   WixUILicenseRtf: "license.rtf"

# Bundle (.exe chaining redistributables)
bundle:
  name: "myapp"
  version: "0.1.0"
  manufacturer: "${USER}"
  # upgrade_code: "00000000-0000-0000-0000-000000000000"
  include_vc_redist_x86: false
  include_vc_redist_x64: true

build_dir: "build/wixforge"

# Logging
log_level: "info"              # debug | info | warn | error
"""
