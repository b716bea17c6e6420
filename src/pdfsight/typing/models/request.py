"""Tool request models."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from pdfsight.typing.enums import ProcessingMode

DEFAULT_DPI = 150
DEFAULT_MAX_PAGES = 50
DEFAULT_VISION_MAX_PAGES = 20

PageNumber = Annotated[int, Field(ge=1)]


class RenderRequest(BaseModel):
    """Processing options applied to an already-fetched document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    mode: ProcessingMode = ProcessingMode.AUTO
    dpi: int = Field(default=DEFAULT_DPI, ge=72, le=300)
    max_pages: int = Field(default=DEFAULT_MAX_PAGES, ge=1, le=100)
    pages: list[PageNumber] | None = None

    @property
    def explicit_pages(self) -> list[int] | None:
        """Return the caller's page list, treating an empty list as absent."""
        return self.pages or None


class FetchAndParseRequest(RenderRequest):
    """Input of the `fetch_and_parse_pdf` tool."""

    url: str


class VisionRequest(BaseModel):
    """Input of the `analyze_pdf_with_vision` tool."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str
    prompt: str = Field(min_length=1)
    dpi: int = Field(default=DEFAULT_DPI, ge=72, le=300)
    max_pages: int = Field(default=DEFAULT_VISION_MAX_PAGES, ge=1, le=50)
    pages: list[PageNumber] | None = None
    model: str | None = None
