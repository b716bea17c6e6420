"""Vision pass-through: rendered pages plus a prompt to a vision model."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from pdfsight.backends.vision_openai import VisionBackend
from pdfsight.fetcher import fetch_pdf
from pdfsight.pdf_engine import PyMuPDFEngine
from pdfsight.pdf_render import render_pages, resolve_image_targets
from pdfsight.reporting import format_vision_report
from pdfsight.settings import get_settings

if TYPE_CHECKING:
    from pdfsight.settings import Settings
    from pdfsight.typing.models import VisionRequest
    from pdfsight.typing.protocol import PdfEngine


async def fetch_and_analyze_with_vision(
    request: VisionRequest,
    *,
    engine: PdfEngine | None = None,
    settings: Settings | None = None,
    backend: VisionBackend | None = None,
) -> str:
    """Fetch a PDF, render its pages and return the vision model's analysis.

    Args:
        request (VisionRequest): URL, prompt and render options.
        engine (PdfEngine | None): PDF engine; defaults to PyMuPDF.
        settings (Settings | None): Runtime settings; defaults to cached settings.
        backend (VisionBackend | None): Vision backend; built from settings by default.

    Returns:
        str: Markdown report wrapping the model response.
    """
    engine = engine or PyMuPDFEngine()
    settings = settings or get_settings()
    backend = backend or VisionBackend(settings)

    model = request.model or settings.openai_model
    with structlog.contextvars.bound_contextvars(url=request.url, model=model):
        pdf_bytes = await fetch_pdf(request.url, settings=settings)
        page_count = await asyncio.to_thread(engine.page_count, pdf_bytes)
        targets = resolve_image_targets(page_count, max_pages=request.max_pages, pages=request.pages)
        pages = await render_pages(
            engine,
            pdf_bytes,
            targets,
            dpi=request.dpi,
            batch_size=settings.render_batch_size,
        )
        answer = await backend.analyze(pages, request.prompt, model=model)

    return format_vision_report(
        url=request.url,
        model=model,
        dpi=request.dpi,
        prompt=request.prompt,
        analysis=answer,
        pages=pages,
    )
