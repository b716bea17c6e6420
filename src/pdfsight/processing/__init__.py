"""Document analysis and page selection."""

from pdfsight.processing.document_analysis import (
    MODE_RULES,
    DocumentMetrics,
    analyze_document,
    analyze_page_signals,
    recommend_mode,
)
from pdfsight.processing.page_selection import select_pages_to_render

__all__ = [
    "MODE_RULES",
    "DocumentMetrics",
    "analyze_document",
    "analyze_page_signals",
    "recommend_mode",
    "select_pages_to_render",
]
