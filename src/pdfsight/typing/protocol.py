"""PDF engine interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pdfsight.typing.models import PageSignal, RenderedPage, TextContent


class PdfEngine(Protocol):
    """Primitives the processing core needs from a PDF library.

    Every method receives the raw document bytes so implementations hold no
    per-request state and can be shared across concurrent requests.
    """

    def page_count(self, pdf_bytes: bytes) -> int:
        """Return the number of pages.

        Args:
            pdf_bytes: Raw PDF document.

        Returns:
            int: Page count.
        """

    def extract_text(self, pdf_bytes: bytes) -> TextContent:
        """Extract the text of every page along with document metadata.

        Args:
            pdf_bytes: Raw PDF document.

        Returns:
            TextContent: Text with page markers and metadata.
        """

    def page_signal(self, pdf_bytes: bytes, page_number: int) -> PageSignal:
        """Report text length and image presence for one page.

        Args:
            pdf_bytes: Raw PDF document.
            page_number: 1-based page number.

        Returns:
            PageSignal: Signals for the page.
        """

    def page_signals(self, pdf_bytes: bytes) -> list[PageSignal]:
        """Report signals for every page, ordered by page number.

        Args:
            pdf_bytes: Raw PDF document.

        Returns:
            list[PageSignal]: One signal per page.
        """

    def render_page(self, pdf_bytes: bytes, page_number: int, dpi: int) -> RenderedPage:
        """Rasterize one page to PNG.

        Args:
            pdf_bytes: Raw PDF document.
            page_number: 1-based page number.
            dpi: Target resolution.

        Returns:
            RenderedPage: Encoded page image.
        """
