"""PyMuPDF-backed implementation of the PDF engine primitives."""

from __future__ import annotations

import base64
import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

import fitz

from pdfsight.exceptions import ParseError, RenderError
from pdfsight.logging import get_logger
from pdfsight.typing.models import PageSignal, PdfMetadata, RenderedPage, TextContent

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = get_logger(__name__)

# MuPDF is not thread-safe; calls from render worker threads are serialized here.
_MUPDF_LOCK = threading.RLock()

_METADATA_KEYS = {
    "title": "title",
    "author": "author",
    "subject": "subject",
    "creator": "creator",
    "producer": "producer",
    "creationDate": "creation_date",
}


def _normalize_whitespace(text: str) -> str:
    return " ".join(text.split())


class PyMuPDFEngine:
    """PDF engine reading documents from in-memory bytes with PyMuPDF."""

    @staticmethod
    @contextmanager
    def _open(pdf_bytes: bytes) -> Iterator[fitz.Document]:
        """Open a document from bytes.

        Args:
            pdf_bytes (bytes): Raw PDF document.

        Raises:
            ParseError: If the bytes are not a readable, unencrypted PDF.

        Yields:
            fitz.Document: Open document, closed on exit.
        """
        with _MUPDF_LOCK:
            try:
                doc = fitz.open(stream=pdf_bytes, filetype="pdf")
            except Exception as exc:
                raise ParseError(message=f"Failed to open PDF: {exc}") from exc
            try:
                if doc.needs_pass:
                    raise ParseError(message="Encrypted PDFs are not supported")
                yield doc
            finally:
                doc.close()

    @staticmethod
    def _check_page_number(doc: fitz.Document, page_number: int) -> None:
        if not 1 <= page_number <= len(doc):
            raise ParseError(message=f"Page {page_number} is out of range (1-{len(doc)})")

    def page_count(self, pdf_bytes: bytes) -> int:
        """Return the number of pages.

        Args:
            pdf_bytes (bytes): Raw PDF document.

        Returns:
            int: Page count.
        """
        with self._open(pdf_bytes) as doc:
            return len(doc)

    def extract_text(self, pdf_bytes: bytes) -> TextContent:
        """Extract page texts and metadata.

        Pages are joined as `[Page N]` blocks separated by blank lines.

        Args:
            pdf_bytes (bytes): Raw PDF document.

        Raises:
            ParseError: If the document or one of its pages cannot be read.

        Returns:
            TextContent: Text with page markers and metadata.
        """
        with self._open(pdf_bytes) as doc:
            try:
                page_texts = [page.get_text("text").strip() for page in doc]
            except Exception as exc:
                raise ParseError(message=f"Failed to extract text from PDF: {exc}") from exc
            metadata = self._read_metadata(doc)

        text = "\n\n".join(f"[Page {index}]\n{page_text}" for index, page_text in enumerate(page_texts, start=1))
        return TextContent(text=text, metadata=metadata)

    @staticmethod
    def _read_metadata(doc: fitz.Document) -> PdfMetadata:
        """Read the document information dictionary.

        Args:
            doc (fitz.Document): Open document.

        Returns:
            PdfMetadata: Metadata with empty entries dropped.
        """
        raw = doc.metadata or {}
        values = {
            field: value.strip()
            for key, field in _METADATA_KEYS.items()
            if isinstance(value := raw.get(key), str) and value.strip()
        }
        return PdfMetadata(page_count=len(doc), **values)

    def page_signal(self, pdf_bytes: bytes, page_number: int) -> PageSignal:
        """Report signals for one page.

        Args:
            pdf_bytes (bytes): Raw PDF document.
            page_number (int): 1-based page number.

        Returns:
            PageSignal: Signals for the page.
        """
        with self._open(pdf_bytes) as doc:
            self._check_page_number(doc, page_number)
            return self._signal_for(doc.load_page(page_number - 1), page_number)

    def page_signals(self, pdf_bytes: bytes) -> list[PageSignal]:
        """Report signals for every page in page order.

        Args:
            pdf_bytes (bytes): Raw PDF document.

        Returns:
            list[PageSignal]: One signal per page.
        """
        with self._open(pdf_bytes) as doc:
            return [self._signal_for(page, index) for index, page in enumerate(doc, start=1)]

    @staticmethod
    def _signal_for(page: fitz.Page, page_number: int) -> PageSignal:
        """Measure a loaded page.

        Args:
            page (fitz.Page): Loaded page.
            page_number (int): 1-based page number.

        Raises:
            ParseError: If the page content stream cannot be interpreted.

        Returns:
            PageSignal: Text length and image presence.
        """
        try:
            text = page.get_text("text")
            # Lists raster images actually painted on the page, inline images included.
            images = page.get_image_info()
        except Exception as exc:
            raise ParseError(message=f"Failed to analyze page {page_number}: {exc}") from exc
        return PageSignal(
            page_number=page_number,
            text_length=len(_normalize_whitespace(text)),
            has_images=bool(images),
        )

    def render_page(self, pdf_bytes: bytes, page_number: int, dpi: int) -> RenderedPage:
        """Rasterize one page to PNG.

        Args:
            pdf_bytes (bytes): Raw PDF document.
            page_number (int): 1-based page number.
            dpi (int): Target resolution.

        Raises:
            RenderError: If the page cannot be rasterized.

        Returns:
            RenderedPage: Base64 PNG with pixel size.
        """
        with self._open(pdf_bytes) as doc:
            self._check_page_number(doc, page_number)
            try:
                pix = doc.load_page(page_number - 1).get_pixmap(dpi=dpi)
                image_bytes = pix.tobytes(output="png")
            except Exception as exc:
                raise RenderError(message=f"Failed to render page: {exc}", page_number=page_number) from exc

        return RenderedPage(
            page_number=page_number,
            mime_type="image/png",
            data_base64=base64.b64encode(image_bytes).decode("ascii"),
            width=pix.width,
            height=pix.height,
        )
