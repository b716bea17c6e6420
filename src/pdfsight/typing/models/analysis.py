"""Document-level analysis model."""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pdfsight.typing.enums import ProcessingMode


class DocumentAnalysis(BaseModel):
    """Aggregated page signals and the processing mode they recommend."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    page_count: int = Field(ge=0)
    has_visuals: bool
    visual_page_numbers: list[int]
    text_density: float = Field(ge=0.0)
    recommended_mode: ProcessingMode

    @model_validator(mode="after")
    def _check_visual_pages(self) -> Self:
        """Ensure visual pages are in range and strictly ascending.

        Raises:
            ValueError: If the visual page list breaks ordering or range constraints.

        Returns:
            Self: Validated analysis.
        """
        pages = self.visual_page_numbers
        if any(page < 1 or page > self.page_count for page in pages):
            message = f"visual_page_numbers must lie within [1, {self.page_count}]"
            raise ValueError(message)
        if any(current >= following for current, following in zip(pages, pages[1:], strict=False)):
            raise ValueError("visual_page_numbers must be strictly ascending")  # noqa: TRY003
        if self.has_visuals != bool(pages):
            raise ValueError("has_visuals must match visual_page_numbers")  # noqa: TRY003
        if not self.recommended_mode.is_resolved:
            raise ValueError("recommended_mode cannot be 'auto'")  # noqa: TRY003
        return self

    @property
    def visual_ratio(self) -> float:
        """Return the share of pages classified as visual."""
        if self.page_count == 0:
            return 0.0
        return len(self.visual_page_numbers) / self.page_count
