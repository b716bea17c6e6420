"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class AsyncExecutionError(PackageError):
    """Raised when an async operation fails in compatibility runner."""

    result: BaseException
    message: str = "Async operation failed"

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.result}"


@dataclass(frozen=True)
class InvalidURLError(PackageError):
    """Raised when a document URL is malformed or uses an unsupported scheme."""

    url: str
    reason: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Invalid URL '{self.url}': {self.reason}"


@dataclass(frozen=True)
class FetchError(PackageError):
    """Raised when a document cannot be downloaded (status, timeout, size)."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class ParseError(PackageError):
    """Raised when the PDF engine cannot open or read a document."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class RenderError(PackageError):
    """Raised when the PDF engine cannot rasterize a page."""

    message: str
    page_number: int | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        if self.page_number is None:
            return self.message
        return f"{self.message} (page {self.page_number})"


@dataclass(frozen=True)
class VisionError(PackageError):
    """Raised when the vision model backend fails."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class DependencyError(PackageError):
    """Raised when optional runtime dependencies are missing."""

    missing_package: list[str]
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing runtime dependencies for '{self.message}': {', '.join(self.missing_package)}"
