from __future__ import annotations

from pdfsight.reporting import (
    format_hybrid_report,
    format_images_report,
    format_text_report,
    format_vision_report,
)
from pdfsight.typing.enums import ProcessingMode
from pdfsight.typing.models import DocumentAnalysis, PdfMetadata, RenderedPage, TextContent


def _page(page_number: int) -> RenderedPage:
    return RenderedPage(page_number=page_number, data_base64="iVBORw0K", width=1240, height=1754)


def _content(**metadata: str) -> TextContent:
    return TextContent(
        text="[Page 1]\nHello\n\n[Page 2]\nWorld",
        metadata=PdfMetadata(page_count=2, **metadata),
    )


def test_text_report_lists_present_metadata_only() -> None:
    report = format_text_report(_content(title="Annual Report", subject="Finance"))

    assert report.startswith("# PDF Content (Text Mode)\n")
    assert "**Title:** Annual Report" in report
    assert "**Subject:** Finance" in report
    assert "**Author:**" not in report
    assert "**Pages:** 2" in report
    assert report.endswith("---\n\n[Page 1]\nHello\n\n[Page 2]\nWorld")


def test_images_report_without_pages_still_has_header_and_count() -> None:
    report = format_images_report([], dpi=150)

    assert report.startswith("# PDF Content (Images Mode)")
    assert "**Rendered Pages:** 0" in report
    assert "**DPI:** 150" in report
    assert "## Page" not in report


def test_images_report_embeds_each_page_as_data_uri() -> None:
    report = format_images_report([_page(2), _page(5)], dpi=96)

    assert "**Rendered Pages:** 2" in report
    assert "## Page 2\n\n![Page 2](data:image/png;base64,iVBORw0K)" in report
    assert "*Size: 1240x1754px*" in report
    assert report.index("## Page 2") < report.index("## Page 5")


def test_hybrid_report_combines_text_and_visual_pages() -> None:
    analysis = DocumentAnalysis(
        page_count=2,
        has_visuals=True,
        visual_page_numbers=[2],
        text_density=612.6,
        recommended_mode=ProcessingMode.HYBRID,
    )

    report = format_hybrid_report(_content(author="Jo Doe"), analysis, [_page(2)])

    assert report.startswith("# PDF Content (Hybrid Mode)")
    assert "**Author:** Jo Doe" in report
    assert "**Text Density:** 613 chars/page" in report
    assert "**Visual Pages:** 1" in report
    assert "**Rendered Pages:** 1" in report
    assert report.index("## Text Content") < report.index("## Visual Pages")
    assert "### Page 2\n\n![Page 2](data:image/png;base64,iVBORw0K)" in report


def test_hybrid_report_omits_visual_section_without_images() -> None:
    analysis = DocumentAnalysis(
        page_count=2,
        has_visuals=False,
        visual_page_numbers=[],
        text_density=0.0,
        recommended_mode=ProcessingMode.TEXT,
    )

    report = format_hybrid_report(_content(), analysis, [])

    assert "**Rendered Pages:** 0" in report
    assert "## Visual Pages" not in report


def test_vision_report_keeps_model_answer_verbatim() -> None:
    answer = "The chart shows **growth** of 12%.\n\n| a | b |"

    report = format_vision_report(
        url="https://example.com/a.pdf",
        model="gpt-4o",
        dpi=150,
        prompt="Summarize the chart",
        analysis=answer,
        pages=[_page(1), _page(3)],
    )

    assert report.startswith("# PDF Visual Analysis (gpt-4o)")
    assert "**Source URL:** https://example.com/a.pdf" in report
    assert "**Pages Analyzed:** 2" in report
    assert f"## Model Analysis\n\n{answer}\n" in report
    assert "- Page 3 (1240x1754px)" in report
