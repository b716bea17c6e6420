"""Core domain model exports."""

from pdfsight.typing.models.analysis import DocumentAnalysis
from pdfsight.typing.models.page import PageSignal, PdfMetadata, RenderedPage, TextContent
from pdfsight.typing.models.request import FetchAndParseRequest, RenderRequest, VisionRequest

__all__ = [
    "DocumentAnalysis",
    "FetchAndParseRequest",
    "PageSignal",
    "PdfMetadata",
    "RenderRequest",
    "RenderedPage",
    "TextContent",
    "VisionRequest",
]
