"""Page targeting and batch-bounded concurrent rendering."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from pdfsight.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pdfsight.typing.models import RenderedPage
    from pdfsight.typing.protocol import PdfEngine

logger = get_logger(__name__)

DEFAULT_RENDER_BATCH_SIZE = 5


def filter_page_numbers(pages: Sequence[int], page_count: int) -> list[int]:
    """Drop out-of-range and repeated page numbers, keeping request order.

    Args:
        pages (Sequence[int]): Requested page numbers.
        page_count (int): Number of pages in the document.

    Returns:
        list[int]: Valid page numbers in first-seen order.
    """
    seen: set[int] = set()
    valid: list[int] = []
    for page in pages:
        if 1 <= page <= page_count and page not in seen:
            seen.add(page)
            valid.append(page)
    return valid


def resolve_image_targets(page_count: int, *, max_pages: int, pages: Sequence[int] | None) -> list[int]:
    """Resolve which pages an images-mode request renders.

    Args:
        page_count (int): Number of pages in the document.
        max_pages (int): Maximum pages to render.
        pages (Sequence[int] | None): Explicit page list, if any.

    Returns:
        list[int]: Pages to render; empty when every explicit page is out of range.
    """
    if pages:
        return filter_page_numbers(pages, page_count)[:max_pages]
    return list(range(1, min(page_count, max_pages) + 1))


async def render_pages(
    engine: PdfEngine,
    pdf_bytes: bytes,
    page_numbers: Sequence[int],
    *,
    dpi: int,
    batch_size: int = DEFAULT_RENDER_BATCH_SIZE,
) -> list[RenderedPage]:
    """Render pages in sequential batches of concurrent worker-thread renders.

    A batch starts only once the previous one completed. The first failure
    aborts the whole call.

    Args:
        engine (PdfEngine): PDF engine.
        pdf_bytes (bytes): Raw PDF document.
        page_numbers (Sequence[int]): Pages to render, in output order.
        dpi (int): Render resolution.
        batch_size (int): Maximum concurrent renders.

    Raises:
        ValueError: If `batch_size` is lower than 1.

    Returns:
        list[RenderedPage]: Rendered pages in the order of `page_numbers`.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")  # noqa: TRY003

    rendered: list[RenderedPage] = []
    for start in range(0, len(page_numbers), batch_size):
        batch = page_numbers[start : start + batch_size]
        # gather returns results positionally, whatever the completion order.
        batch_pages = await asyncio.gather(
            *(asyncio.to_thread(engine.render_page, pdf_bytes, page_number, dpi) for page_number in batch),
        )
        rendered.extend(batch_pages)
        logger.debug("Render batch completed", extra={"pages": list(batch), "dpi": dpi})

    logger.info("PDF rendered", extra={"pages": len(rendered), "dpi": dpi})
    return rendered
