from .loader import load_config
from .models import (
    BundleConfig,
    InstallerConfig,
    ToolsetConfig,
    WixforgeConfig,
)

__all__ = [
    "BundleConfig",
    "InstallerConfig",
    "ToolsetConfig",
    "WixforgeConfig",
    "load_config",
]
