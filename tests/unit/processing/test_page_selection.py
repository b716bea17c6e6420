from __future__ import annotations

import pytest

from pdfsight.processing.page_selection import select_pages_to_render
from pdfsight.typing.enums import ProcessingMode
from pdfsight.typing.models import DocumentAnalysis


def _analysis(page_count: int, visual_pages: list[int]) -> DocumentAnalysis:
    return DocumentAnalysis(
        page_count=page_count,
        has_visuals=bool(visual_pages),
        visual_page_numbers=visual_pages,
        text_density=100.0,
        recommended_mode=ProcessingMode.HYBRID if visual_pages else ProcessingMode.TEXT,
    )


def test_spreads_selection_across_many_visual_pages() -> None:
    analysis = _analysis(20, list(range(2, 21, 2)))

    assert select_pages_to_render(analysis, 5) == [2, 8, 14, 20]


def test_returns_all_visual_pages_within_limit() -> None:
    analysis = _analysis(12, [2, 7, 11])

    assert select_pages_to_render(analysis, 10) == [2, 7, 11]


def test_returns_first_page_when_nothing_is_visual() -> None:
    assert select_pages_to_render(_analysis(8, []), 10) == [1]


def test_returns_nothing_for_empty_document() -> None:
    assert select_pages_to_render(_analysis(0, []), 10) == []


def test_single_page_budget_keeps_first_visual_page() -> None:
    assert select_pages_to_render(_analysis(9, [3, 5, 9]), 1) == [3]


def test_default_budget_is_ten_pages() -> None:
    analysis = _analysis(40, list(range(1, 41)))

    selected = select_pages_to_render(analysis)

    assert selected == [1, 6, 11, 16, 21, 26, 31, 36]


def test_rejects_budget_below_one() -> None:
    with pytest.raises(ValueError, match="max_pages"):
        select_pages_to_render(_analysis(3, [1, 2]), 0)


@pytest.mark.parametrize(
    ("visual_pages", "max_pages"),
    [
        (list(range(1, 31)), 8),
        (list(range(1, 101, 3)), 10),
        ([2, 3, 5, 7, 11, 13, 17, 19, 23], 4),
        (list(range(5, 60)), 2),
    ],
)
def test_selection_is_an_ascending_bounded_subset(visual_pages: list[int], max_pages: int) -> None:
    analysis = _analysis(max(visual_pages), visual_pages)

    selected = select_pages_to_render(analysis, max_pages)

    assert selected[0] == visual_pages[0]
    assert len(selected) <= max_pages
    assert selected == sorted(set(selected))
    assert set(selected) <= set(visual_pages)
