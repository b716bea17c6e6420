"""MCP server exposing the PDF tools."""

from typing import Annotated

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field, ValidationError

from pdfsight import __version__
from pdfsight.dispatcher import fetch_and_process
from pdfsight.exceptions import PackageError
from pdfsight.logging import get_logger
from pdfsight.settings import Settings, get_settings
from pdfsight.typing.enums import ProcessingMode
from pdfsight.typing.models import FetchAndParseRequest, VisionRequest
from pdfsight.vision import fetch_and_analyze_with_vision

logger = get_logger(__name__)

FETCH_AND_PARSE_DESCRIPTION = (
    "Fetches a PDF from a URL and parses it. Supports multiple modes: text extraction, image rendering, "
    "hybrid (text + images), or auto-detection. Use text mode for text-heavy documents, images mode for "
    "visual content, hybrid for mixed content, or auto to let the tool decide based on document analysis."
)
VISION_DESCRIPTION = (
    "Fetches a PDF from a URL, renders its pages as images and sends them with a custom prompt to a "
    "vision-capable model. Useful for charts, diagrams, tables, handwriting and complex layouts that text "
    "extraction misses. Requires OPENAI_API_KEY."
)

OptionalDpi = Annotated[
    int | None,
    Field(ge=72, le=300, description="DPI for image rendering (72-300, default 150)"),
]


mcp = FastMCP("pdfsight")


@mcp.tool(name="fetch_and_parse_pdf", description=FETCH_AND_PARSE_DESCRIPTION)
async def fetch_and_parse_pdf(
    url: Annotated[str, Field(description="URL of the PDF to fetch and parse")],
    mode: Annotated[
        ProcessingMode,
        Field(
            description=(
                "Extraction mode: text (text only), images (render pages), "
                "hybrid (text + key images), auto (intelligent detection)"
            ),
        ),
    ] = ProcessingMode.AUTO,
    dpi: OptionalDpi = None,
    max_pages: Annotated[
        int | None,
        Field(ge=1, le=100, description="Maximum number of pages to render as images (1-100, default 50)"),
    ] = None,
    pages: Annotated[
        list[int] | None,
        Field(description="Specific page numbers to render (only used in images/hybrid mode)"),
    ] = None,
) -> str:
    """Fetch a PDF and return it as text, page images, or both."""
    settings = get_settings()
    try:
        request = FetchAndParseRequest(
            url=url,
            mode=mode,
            dpi=dpi or settings.default_dpi,
            max_pages=max_pages or settings.default_max_pages,
            pages=pages,
        )
        return await fetch_and_process(request, settings=settings)
    except (PackageError, ValidationError) as exc:
        logger.warning("fetch_and_parse_pdf failed", extra={"url": url, "error": str(exc)})
        message = f"Failed to fetch and parse PDF: {exc}"
        raise ToolError(message) from exc


@mcp.tool(name="analyze_pdf_with_vision", description=VISION_DESCRIPTION)
async def analyze_pdf_with_vision(
    url: Annotated[str, Field(description="URL of the PDF to analyze")],
    prompt: Annotated[str, Field(description="What to extract or understand from the document")],
    dpi: OptionalDpi = None,
    max_pages: Annotated[
        int | None,
        Field(ge=1, le=50, description="Maximum number of pages sent to the model (1-50, default 20)"),
    ] = None,
    pages: Annotated[list[int] | None, Field(description="Specific page numbers to send (optional)")] = None,
    model: Annotated[str | None, Field(description="Vision model name; defaults to OPENAI_MODEL")] = None,
) -> str:
    """Render a PDF and return a vision model's answer to the prompt."""
    settings = get_settings()
    try:
        options = {"max_pages": max_pages, "pages": pages, "model": model}
        request = VisionRequest(
            url=url,
            prompt=prompt,
            dpi=dpi or settings.default_dpi,
            **{key: value for key, value in options.items() if value is not None},
        )
        return await fetch_and_analyze_with_vision(request, settings=settings)
    except (PackageError, ValidationError) as exc:
        logger.warning("analyze_pdf_with_vision failed", extra={"url": url, "error": str(exc)})
        message = f"Failed to analyze PDF with vision model: {exc}"
        raise ToolError(message) from exc


def run_server(settings: Settings | None = None, *, transport: str | None = None) -> None:
    """Run the MCP server until the transport closes.

    Args:
        settings (Settings | None): Runtime settings; defaults to cached settings.
        transport (str | None): Transport override; defaults to `MCP_TRANSPORT`.
    """
    config = settings or get_settings()
    selected = transport or config.mcp_transport
    logger.info("Starting MCP server", extra={"transport": selected, "version": __version__})
    try:
        mcp.run(transport=selected)  # type: ignore[arg-type]
    finally:
        get_settings().close_httpx_clients()
