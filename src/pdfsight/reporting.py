"""Markdown reports returned to agents."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pdfsight.typing.enums import ProcessingMode

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pdfsight.typing.models import DocumentAnalysis, PdfMetadata, RenderedPage, TextContent

SEPARATOR = "---"


def _header(mode: ProcessingMode) -> str:
    return f"# PDF Content ({mode.label} Mode)"


def _metadata_lines(metadata: PdfMetadata, *, fields: Sequence[str]) -> list[str]:
    """Build `**Label:** value` lines for the metadata fields that are set.

    Args:
        metadata (PdfMetadata): Document metadata.
        fields (Sequence[str]): Metadata attribute names, in output order.

    Returns:
        list[str]: One line per present field.
    """
    lines: list[str] = []
    for field in fields:
        value = getattr(metadata, field)
        if value:
            label = field.replace("_", " ").title()
            lines.append(f"**{label}:** {value}")
    return lines


def _image_markdown(page: RenderedPage) -> str:
    return f"![Page {page.page_number}]({page.data_uri})"


def format_text_report(content: TextContent) -> str:
    """Format a text-mode report.

    Args:
        content (TextContent): Extracted text and metadata.

    Returns:
        str: Markdown report.
    """
    lines = [
        _header(ProcessingMode.TEXT),
        "",
        *_metadata_lines(content.metadata, fields=("title", "author", "subject")),
        f"**Pages:** {content.metadata.page_count}",
        "",
        SEPARATOR,
        "",
        content.text,
    ]
    return "\n".join(lines)


def format_images_report(pages: Sequence[RenderedPage], *, dpi: int) -> str:
    """Format an images-mode report.

    Args:
        pages (Sequence[RenderedPage]): Rendered pages, possibly empty.
        dpi (int): Render resolution.

    Returns:
        str: Markdown report with one `## Page N` section per image.
    """
    lines = [
        _header(ProcessingMode.IMAGES),
        "",
        f"**Rendered Pages:** {len(pages)}",
        f"**DPI:** {dpi}",
        "",
        SEPARATOR,
        "",
    ]
    for page in pages:
        lines.extend(
            [
                f"## Page {page.page_number}",
                "",
                _image_markdown(page),
                "",
                f"*Size: {page.width}x{page.height}px*",
                "",
            ],
        )
    return "\n".join(lines)


def format_hybrid_report(
    content: TextContent,
    analysis: DocumentAnalysis,
    pages: Sequence[RenderedPage],
) -> str:
    """Format a hybrid report: full text followed by the rendered visual pages.

    Args:
        content (TextContent): Extracted text and metadata.
        analysis (DocumentAnalysis): Document analysis.
        pages (Sequence[RenderedPage]): Rendered pages.

    Returns:
        str: Markdown report.
    """
    lines = [
        _header(ProcessingMode.HYBRID),
        "",
        *_metadata_lines(content.metadata, fields=("title", "author")),
        f"**Pages:** {content.metadata.page_count}",
        f"**Text Density:** {round(analysis.text_density)} chars/page",
        f"**Visual Pages:** {len(analysis.visual_page_numbers)}",
        f"**Rendered Pages:** {len(pages)}",
        "",
        SEPARATOR,
        "",
        "## Text Content",
        "",
        content.text,
        "",
        SEPARATOR,
        "",
    ]
    if pages:
        lines.extend(
            [
                "## Visual Pages",
                "",
                "The following pages contain charts, diagrams, or other visual elements:",
                "",
            ],
        )
        for page in pages:
            lines.extend([f"### Page {page.page_number}", "", _image_markdown(page), ""])
    return "\n".join(lines)


def format_vision_report(
    *,
    url: str,
    model: str,
    dpi: int,
    prompt: str,
    analysis: str,
    pages: Sequence[RenderedPage],
) -> str:
    """Format the vision tool response around the model's verbatim answer.

    Args:
        url (str): Source document URL.
        model (str): Vision model name.
        dpi (int): Render resolution.
        prompt (str): User prompt sent to the model.
        analysis (str): Model response, unmodified.
        pages (Sequence[RenderedPage]): Pages sent to the model.

    Returns:
        str: Markdown report.
    """
    lines = [
        f"# PDF Visual Analysis ({model})",
        "",
        f"**Source URL:** {url}",
        f"**Pages Analyzed:** {len(pages)}",
        f"**Model:** {model}",
        f"**DPI:** {dpi}",
        "",
        SEPARATOR,
        "",
        "## User Prompt",
        "",
        prompt,
        "",
        SEPARATOR,
        "",
        "## Model Analysis",
        "",
        analysis,
        "",
        SEPARATOR,
        "",
        "## Analyzed Pages",
        "",
    ]
    lines.extend(f"- Page {page.page_number} ({page.width}x{page.height}px)" for page in pages)
    return "\n".join(lines) + "\n"
