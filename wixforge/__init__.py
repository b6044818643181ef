"""wixforge: build Windows Installer packages from file manifests."""

__version__ = "0.1.0"
