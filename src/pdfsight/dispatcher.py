"""Mode dispatch: turn PDF bytes into an agent-readable markdown report."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from pdfsight.fetcher import fetch_pdf
from pdfsight.logging import get_logger
from pdfsight.pdf_engine import PyMuPDFEngine
from pdfsight.pdf_render import filter_page_numbers, render_pages, resolve_image_targets
from pdfsight.processing import analyze_document, select_pages_to_render
from pdfsight.reporting import format_hybrid_report, format_images_report, format_text_report
from pdfsight.settings import get_settings
from pdfsight.typing.enums import ProcessingMode

if TYPE_CHECKING:
    from pdfsight.settings import Settings
    from pdfsight.typing.models import DocumentAnalysis, FetchAndParseRequest, RenderRequest
    from pdfsight.typing.protocol import PdfEngine

logger = get_logger(__name__)


async def _analyze(pdf_bytes: bytes, engine: PdfEngine, settings: Settings) -> DocumentAnalysis:
    return await asyncio.to_thread(
        analyze_document,
        pdf_bytes,
        engine,
        text_density_threshold=settings.text_density_threshold,
        visual_page_threshold=settings.visual_page_threshold,
    )


async def resolve_mode(
    pdf_bytes: bytes,
    mode: ProcessingMode,
    *,
    engine: PdfEngine,
    settings: Settings,
) -> tuple[ProcessingMode, DocumentAnalysis | None]:
    """Resolve `auto` to a concrete mode by analyzing the document.

    Args:
        pdf_bytes (bytes): Raw PDF document.
        mode (ProcessingMode): Requested mode.
        engine (PdfEngine): PDF engine.
        settings (Settings): Runtime settings.

    Returns:
        tuple[ProcessingMode, DocumentAnalysis | None]: Concrete mode, and the
        analysis when one was computed.
    """
    if mode.is_resolved:
        return mode, None

    logger.info("Analyzing document structure")
    analysis = await _analyze(pdf_bytes, engine, settings)
    logger.info(
        "Auto-detected mode",
        extra={
            "mode": analysis.recommended_mode.to_str(),
            "text_density": round(analysis.text_density),
            "visual_pages": len(analysis.visual_page_numbers),
        },
    )
    return analysis.recommended_mode, analysis


async def _process_text(pdf_bytes: bytes, *, engine: PdfEngine) -> str:
    content = await asyncio.to_thread(engine.extract_text, pdf_bytes)
    logger.info("Text extraction complete", extra={"characters": len(content.text)})
    return format_text_report(content)


async def _process_images(
    pdf_bytes: bytes,
    request: RenderRequest,
    *,
    engine: PdfEngine,
    settings: Settings,
) -> str:
    page_count = await asyncio.to_thread(engine.page_count, pdf_bytes)
    targets = resolve_image_targets(page_count, max_pages=request.max_pages, pages=request.explicit_pages)
    images = await render_pages(
        engine,
        pdf_bytes,
        targets,
        dpi=request.dpi,
        batch_size=settings.render_batch_size,
    )
    return format_images_report(images, dpi=request.dpi)


async def _process_hybrid(
    pdf_bytes: bytes,
    request: RenderRequest,
    *,
    engine: PdfEngine,
    settings: Settings,
    analysis: DocumentAnalysis | None,
) -> str:
    content = await asyncio.to_thread(engine.extract_text, pdf_bytes)
    if analysis is None:
        analysis = await _analyze(pdf_bytes, engine, settings)

    if request.explicit_pages:
        targets = filter_page_numbers(request.explicit_pages, analysis.page_count)
    else:
        targets = select_pages_to_render(analysis, min(settings.hybrid_max_pages, request.max_pages))

    logger.info("Rendering visual pages", extra={"pages": targets})
    images = await render_pages(
        engine,
        pdf_bytes,
        targets,
        dpi=request.dpi,
        batch_size=settings.render_batch_size,
    )
    logger.info(
        "Hybrid processing complete",
        extra={"characters": len(content.text), "images": len(images)},
    )
    return format_hybrid_report(content, analysis, images)


async def process_pdf(
    pdf_bytes: bytes,
    request: RenderRequest,
    *,
    engine: PdfEngine | None = None,
    settings: Settings | None = None,
) -> str:
    """Process a PDF according to the requested mode.

    Errors raised by the engine propagate unchanged; there is no partial result.

    Args:
        pdf_bytes (bytes): Raw PDF document.
        request (RenderRequest): Processing options.
        engine (PdfEngine | None): PDF engine; defaults to PyMuPDF.
        settings (Settings | None): Runtime settings; defaults to cached settings.

    Returns:
        str: Markdown report.
    """
    engine = engine or PyMuPDFEngine()
    settings = settings or get_settings()

    mode, analysis = await resolve_mode(pdf_bytes, request.mode, engine=engine, settings=settings)
    match mode:
        case ProcessingMode.TEXT:
            return await _process_text(pdf_bytes, engine=engine)
        case ProcessingMode.IMAGES:
            return await _process_images(pdf_bytes, request, engine=engine, settings=settings)
        case ProcessingMode.HYBRID:
            return await _process_hybrid(
                pdf_bytes,
                request,
                engine=engine,
                settings=settings,
                analysis=analysis,
            )
        case _:
            message = f"Unknown mode: {mode}"
            raise ValueError(message)


async def fetch_and_process(
    request: FetchAndParseRequest,
    *,
    engine: PdfEngine | None = None,
    settings: Settings | None = None,
) -> str:
    """Fetch a PDF from its URL and process it.

    Args:
        request (FetchAndParseRequest): URL and processing options.
        engine (PdfEngine | None): PDF engine; defaults to PyMuPDF.
        settings (Settings | None): Runtime settings; defaults to cached settings.

    Returns:
        str: Markdown report.
    """
    settings = settings or get_settings()
    with structlog.contextvars.bound_contextvars(url=request.url, requested_mode=request.mode.to_str()):
        pdf_bytes = await fetch_pdf(request.url, settings=settings)
        return await process_pdf(pdf_bytes, request, engine=engine, settings=settings)
