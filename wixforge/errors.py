"""Exception hierarchy for wixforge."""

from __future__ import annotations


class WixforgeError(Exception):
    """Base class for every error raised by wixforge."""


class IdentifierError(WixforgeError, ValueError):
    """A path cannot be turned into a valid WiX identifier."""


class ConfigurationError(WixforgeError, ValueError):
    """Builder configuration is unusable (raised before any I/O)."""


class TemplateError(WixforgeError):
    """Raised when a builtin template fails to render."""


class FetchError(WixforgeError):
    """A remote resource could not be downloaded."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        super().__init__(f"failed to fetch {url}: {reason}")


class IntegrityError(FetchError):
    """Downloaded content does not match its expected SHA-256 digest."""

    def __init__(self, url: str, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(url, f"sha256 mismatch (expected {expected}, got {actual})")


class ToolchainError(WixforgeError):
    """A WiX toolchain stage (candle, light) failed.

    ``returncode`` is ``None`` when the process could not be spawned at all;
    the underlying ``OSError`` is then available as ``__cause__``.
    """

    def __init__(
        self, stage: str, returncode: int | None, cause: Exception | None = None
    ) -> None:
        self.stage = stage
        self.returncode = returncode
        if returncode is None:
            message = f"error running {stage}: {cause}"
        else:
            message = f"error running {stage} (exit code {returncode})"
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause
