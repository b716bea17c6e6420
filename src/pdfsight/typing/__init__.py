"""Typing-centric domain modules."""

from pdfsight.typing.enums import ProcessingMode
from pdfsight.typing.models import (
    DocumentAnalysis,
    FetchAndParseRequest,
    PageSignal,
    PdfMetadata,
    RenderedPage,
    RenderRequest,
    TextContent,
    VisionRequest,
)
from pdfsight.typing.protocol import PdfEngine

__all__ = [
    "DocumentAnalysis",
    "FetchAndParseRequest",
    "PageSignal",
    "PdfEngine",
    "PdfMetadata",
    "ProcessingMode",
    "RenderRequest",
    "RenderedPage",
    "TextContent",
    "VisionRequest",
]
