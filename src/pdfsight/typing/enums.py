"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class ProcessingMode(_EnumMixin):
    """How a document is turned into agent-readable output."""

    TEXT = "text"
    IMAGES = "images"
    HYBRID = "hybrid"
    AUTO = "auto"

    @property
    def label(self) -> str:
        """Return the capitalized label used in report headers."""
        return self.value.capitalize()

    @property
    def is_resolved(self) -> bool:
        """Return whether the mode names a concrete processing branch."""
        return self is not ProcessingMode.AUTO
