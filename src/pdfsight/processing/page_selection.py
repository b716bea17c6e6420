"""Representative page selection for hybrid rendering."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pdfsight.typing.models import DocumentAnalysis


def select_pages_to_render(analysis: DocumentAnalysis, max_pages: int = 10) -> list[int]:
    """Pick visual pages to render, spread evenly across the document.

    The first visual page is always kept. When there are more visual pages than
    `max_pages`, the rest are sampled with a fixed stride, so the result may be
    shorter than `max_pages` when the stride walks off the end of the list.

    Args:
        analysis (DocumentAnalysis): Document analysis.
        max_pages (int): Maximum number of pages to return.

    Raises:
        ValueError: If `max_pages` is lower than 1.

    Returns:
        list[int]: Ascending, unique page numbers; `[1]` when no page is visual,
        empty for a document without pages.
    """
    if max_pages < 1:
        raise ValueError("max_pages must be at least 1")  # noqa: TRY003

    visual_pages = analysis.visual_page_numbers
    if not visual_pages:
        return [1] if analysis.page_count > 0 else []

    if len(visual_pages) <= max_pages:
        return list(visual_pages)

    if max_pages == 1:
        return [visual_pages[0]]

    step = math.ceil((len(visual_pages) - 1) / (max_pages - 1))
    selected = [visual_pages[0]]
    selected.extend(visual_pages[step::step][: max_pages - 1])
    return sorted(selected)
