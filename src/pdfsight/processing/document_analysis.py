"""Document analysis: page signals to a recommended processing mode."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pdfsight.logging import get_logger
from pdfsight.typing.enums import ProcessingMode
from pdfsight.typing.models import DocumentAnalysis, PageSignal

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from pdfsight.typing.protocol import PdfEngine

logger = get_logger(__name__)

DEFAULT_TEXT_DENSITY_THRESHOLD = 500.0
DEFAULT_VISUAL_PAGE_THRESHOLD = 0.2
VISUAL_MAJORITY_RATIO = 0.5


@dataclass(frozen=True)
class DocumentMetrics:
    """Aggregates the mode rules are evaluated against."""

    page_count: int
    visual_page_count: int
    text_density: float
    text_density_threshold: float
    visual_page_threshold: float

    @property
    def visual_ratio(self) -> float:
        """Return the share of visual pages (0 for an empty document)."""
        if self.page_count == 0:
            return 0.0
        return self.visual_page_count / self.page_count


@dataclass(frozen=True)
class ModeRule:
    """One entry of the ordered mode-selection table."""

    name: str
    mode: ProcessingMode
    matches: Callable[[DocumentMetrics], bool]


def _is_empty(metrics: DocumentMetrics) -> bool:
    return metrics.page_count == 0


def _is_text_heavy(metrics: DocumentMetrics) -> bool:
    return metrics.visual_page_count == 0 and metrics.text_density > metrics.text_density_threshold


def _is_visual_heavy(metrics: DocumentMetrics) -> bool:
    return (
        metrics.visual_ratio > VISUAL_MAJORITY_RATIO
        or metrics.text_density < metrics.text_density_threshold / 2
    )


def _is_mixed(metrics: DocumentMetrics) -> bool:
    return metrics.visual_page_count > 0 and metrics.visual_ratio >= metrics.visual_page_threshold


# Evaluated top to bottom; the first match wins.
MODE_RULES: tuple[ModeRule, ...] = (
    ModeRule(name="empty_document", mode=ProcessingMode.TEXT, matches=_is_empty),
    ModeRule(name="text_heavy", mode=ProcessingMode.TEXT, matches=_is_text_heavy),
    ModeRule(name="visual_heavy", mode=ProcessingMode.IMAGES, matches=_is_visual_heavy),
    ModeRule(name="mixed_content", mode=ProcessingMode.HYBRID, matches=_is_mixed),
)
FALLBACK_MODE = ProcessingMode.TEXT


def recommend_mode(metrics: DocumentMetrics) -> tuple[ProcessingMode, str]:
    """Pick the processing mode for the given metrics.

    Args:
        metrics (DocumentMetrics): Aggregated document metrics.

    Returns:
        tuple[ProcessingMode, str]: Selected mode and the name of the rule that chose it.
    """
    for rule in MODE_RULES:
        if rule.matches(metrics):
            return rule.mode, rule.name
    return FALLBACK_MODE, "fallback"


def is_visual_page(signal: PageSignal, *, text_density_threshold: float) -> bool:
    """Return whether a page should be treated as visual content.

    Args:
        signal (PageSignal): Page signals.
        text_density_threshold (float): Characters per page considered text-heavy.

    Returns:
        bool: True when the page paints images or carries little text.
    """
    return signal.has_images or signal.text_length < text_density_threshold / 2


def analyze_page_signals(
    signals: Sequence[PageSignal],
    *,
    text_density_threshold: float = DEFAULT_TEXT_DENSITY_THRESHOLD,
    visual_page_threshold: float = DEFAULT_VISUAL_PAGE_THRESHOLD,
) -> DocumentAnalysis:
    """Aggregate page signals into a document analysis.

    Args:
        signals (Sequence[PageSignal]): One signal per page, pages numbered 1..n.
        text_density_threshold (float): Average characters per page above which
            a document counts as text-heavy.
        visual_page_threshold (float): Minimum visual page ratio for hybrid mode.

    Raises:
        ValueError: If the signals do not cover pages 1..n exactly once.

    Returns:
        DocumentAnalysis: Metrics and recommended mode.
    """
    ordered = sorted(signals, key=lambda signal: signal.page_number)
    page_count = len(ordered)
    if [signal.page_number for signal in ordered] != list(range(1, page_count + 1)):
        raise ValueError("Page signals must cover pages 1..n exactly once")  # noqa: TRY003

    visual_page_numbers = [
        signal.page_number
        for signal in ordered
        if is_visual_page(signal, text_density_threshold=text_density_threshold)
    ]
    total_text_length = sum(signal.text_length for signal in ordered)
    text_density = total_text_length / page_count if page_count else 0.0

    metrics = DocumentMetrics(
        page_count=page_count,
        visual_page_count=len(visual_page_numbers),
        text_density=text_density,
        text_density_threshold=text_density_threshold,
        visual_page_threshold=visual_page_threshold,
    )
    mode, rule_name = recommend_mode(metrics)
    logger.debug(
        "Document analyzed",
        extra={
            "pages": page_count,
            "visual_pages": len(visual_page_numbers),
            "text_density": round(text_density, 1),
            "visual_ratio": round(metrics.visual_ratio, 3),
            "rule": rule_name,
            "mode": mode.to_str(),
        },
    )

    return DocumentAnalysis(
        page_count=page_count,
        has_visuals=bool(visual_page_numbers),
        visual_page_numbers=visual_page_numbers,
        text_density=text_density,
        recommended_mode=mode,
    )


def analyze_document(
    pdf_bytes: bytes,
    engine: PdfEngine,
    *,
    text_density_threshold: float = DEFAULT_TEXT_DENSITY_THRESHOLD,
    visual_page_threshold: float = DEFAULT_VISUAL_PAGE_THRESHOLD,
) -> DocumentAnalysis:
    """Collect page signals from the engine and analyze them.

    Args:
        pdf_bytes (bytes): Raw PDF document.
        engine (PdfEngine): PDF engine providing page signals.
        text_density_threshold (float): See `analyze_page_signals`.
        visual_page_threshold (float): See `analyze_page_signals`.

    Returns:
        DocumentAnalysis: Metrics and recommended mode.
    """
    return analyze_page_signals(
        engine.page_signals(pdf_bytes),
        text_density_threshold=text_density_threshold,
        visual_page_threshold=visual_page_threshold,
    )
