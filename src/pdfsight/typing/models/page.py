"""Per-page and per-document payloads produced by the PDF engine."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PageSignal(BaseModel):
    """Structural signals for one page, as consumed by document analysis."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    page_number: int = Field(ge=1)
    text_length: int = Field(ge=0)
    has_images: bool


class RenderedPage(BaseModel):
    """Rasterized page encoded as base64."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    page_number: int = Field(ge=1)
    mime_type: str = "image/png"
    data_base64: str
    width: int = Field(ge=0)
    height: int = Field(ge=0)

    @property
    def data_uri(self) -> str:
        """Return the page as a `data:` URI."""
        return f"data:{self.mime_type};base64,{self.data_base64}"


class PdfMetadata(BaseModel):
    """Document information dictionary entries; absent entries stay None."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    page_count: int = Field(ge=0)
    title: str | None = None
    author: str | None = None
    subject: str | None = None
    creator: str | None = None
    producer: str | None = None
    creation_date: str | None = None


class TextContent(BaseModel):
    """Full document text with `[Page N]` markers, plus metadata."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str
    metadata: PdfMetadata
