from __future__ import annotations

import asyncio
import threading
import time

import pytest

from pdfsight.exceptions import RenderError
from pdfsight.pdf_render import filter_page_numbers, render_pages, resolve_image_targets
from pdfsight.typing.models import RenderedPage


class _FakeEngine:
    def __init__(self, *, fail_on: int | None = None, delay_s: float = 0.0) -> None:
        self.fail_on = fail_on
        self.delay_s = delay_s
        self.calls: list[tuple[int, int]] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def render_page(self, pdf_bytes: bytes, page_number: int, dpi: int) -> RenderedPage:
        assert pdf_bytes == b"%PDF"
        with self._lock:
            self.calls.append((page_number, dpi))
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            # Later pages finish first so ordering cannot come from completion order.
            time.sleep(self.delay_s / page_number)
            if page_number == self.fail_on:
                raise RenderError("boom", page_number=page_number)
            return RenderedPage(page_number=page_number, data_base64="aGk=", width=10, height=20)
        finally:
            with self._lock:
                self.active -= 1


def test_filter_page_numbers_drops_out_of_range_and_duplicates() -> None:
    assert filter_page_numbers([3, 0, 7, 3, 1, 6], 6) == [3, 1, 6]


def test_resolve_image_targets_defaults_to_leading_pages() -> None:
    assert resolve_image_targets(12, max_pages=5, pages=None) == [1, 2, 3, 4, 5]
    assert resolve_image_targets(3, max_pages=50, pages=None) == [1, 2, 3]


def test_resolve_image_targets_caps_explicit_pages() -> None:
    assert resolve_image_targets(10, max_pages=2, pages=[9, 4, 2]) == [9, 4]


def test_resolve_image_targets_out_of_range_only_yields_nothing() -> None:
    assert resolve_image_targets(5, max_pages=50, pages=[999]) == []


def test_resolve_image_targets_treats_empty_list_as_absent() -> None:
    assert resolve_image_targets(2, max_pages=10, pages=[]) == [1, 2]


def test_render_pages_preserves_requested_order() -> None:
    engine = _FakeEngine(delay_s=0.02)

    pages = asyncio.run(render_pages(engine, b"%PDF", [1, 2, 3, 4, 5, 6, 7], dpi=96, batch_size=3))

    assert [page.page_number for page in pages] == [1, 2, 3, 4, 5, 6, 7]
    assert {dpi for _, dpi in engine.calls} == {96}


def test_render_pages_bounds_concurrency_by_batch_size() -> None:
    engine = _FakeEngine(delay_s=0.05)

    asyncio.run(render_pages(engine, b"%PDF", list(range(1, 12)), dpi=72, batch_size=2))

    assert len(engine.calls) == 11
    assert engine.max_active <= 2


def test_render_pages_starts_next_batch_after_previous_completes() -> None:
    engine = _FakeEngine(delay_s=0.02)

    asyncio.run(render_pages(engine, b"%PDF", [4, 3, 2, 1], dpi=72, batch_size=2))

    first_batch = {page for page, _ in engine.calls[:2]}
    assert first_batch == {4, 3}


def test_render_pages_with_no_targets_renders_nothing() -> None:
    engine = _FakeEngine()

    assert asyncio.run(render_pages(engine, b"%PDF", [], dpi=150)) == []
    assert engine.calls == []


def test_render_pages_propagates_first_failure() -> None:
    engine = _FakeEngine(fail_on=3)

    with pytest.raises(RenderError, match="page 3"):
        asyncio.run(render_pages(engine, b"%PDF", [1, 2, 3, 4, 5, 6], dpi=72, batch_size=2))

    assert all(page <= 4 for page, _ in engine.calls)


def test_render_pages_rejects_invalid_batch_size() -> None:
    with pytest.raises(ValueError, match="batch_size"):
        asyncio.run(render_pages(_FakeEngine(), b"%PDF", [1], dpi=72, batch_size=0))
