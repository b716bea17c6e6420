from __future__ import annotations

import asyncio

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from pdfsight import server
from pdfsight.exceptions import FetchError, VisionError
from pdfsight.settings import Settings
from pdfsight.typing.enums import ProcessingMode
from pdfsight.typing.models import FetchAndParseRequest, VisionRequest


@pytest.fixture
def captured(monkeypatch, settings: Settings) -> list[object]:
    requests: list[object] = []

    async def _fake_process(request: FetchAndParseRequest, *, settings: Settings) -> str:
        requests.append(request)
        return "# PDF Content (Text Mode)"

    async def _fake_vision(request: VisionRequest, *, settings: Settings) -> str:
        requests.append(request)
        return "# PDF Visual Analysis (gpt-4o)"

    monkeypatch.setattr(server, "get_settings", lambda: settings)
    monkeypatch.setattr(server, "fetch_and_process", _fake_process)
    monkeypatch.setattr(server, "fetch_and_analyze_with_vision", _fake_vision)
    return requests


def test_server_registers_both_tools() -> None:
    tools = {tool.name: tool for tool in asyncio.run(server.mcp.list_tools())}

    assert set(tools) == {"fetch_and_parse_pdf", "analyze_pdf_with_vision"}
    fetch_schema = tools["fetch_and_parse_pdf"].inputSchema
    assert fetch_schema["required"] == ["url"]
    assert {"url", "mode", "dpi", "max_pages", "pages"} <= set(fetch_schema["properties"])
    assert set(tools["analyze_pdf_with_vision"].inputSchema["required"]) == {"url", "prompt"}


def test_fetch_and_parse_applies_configured_defaults(captured: list[object]) -> None:
    report = asyncio.run(server.fetch_and_parse_pdf(url="https://example.com/doc.pdf"))

    assert report == "# PDF Content (Text Mode)"
    request = captured[0]
    assert isinstance(request, FetchAndParseRequest)
    assert request.mode == ProcessingMode.AUTO
    assert request.dpi == 150
    assert request.max_pages == 50
    assert request.pages is None


def test_fetch_and_parse_forwards_options(captured: list[object]) -> None:
    asyncio.run(
        server.fetch_and_parse_pdf(
            url="https://example.com/doc.pdf",
            mode=ProcessingMode.HYBRID,
            dpi=200,
            max_pages=4,
            pages=[2, 3],
        ),
    )

    request = captured[0]
    assert request.mode == ProcessingMode.HYBRID
    assert (request.dpi, request.max_pages, request.pages) == (200, 4, [2, 3])


def test_fetch_and_parse_wraps_package_errors(monkeypatch, captured: list[object]) -> None:
    async def _failing(request: FetchAndParseRequest, *, settings: Settings) -> str:
        raise FetchError(message="HTTP 404: Not Found")

    monkeypatch.setattr(server, "fetch_and_process", _failing)

    with pytest.raises(ToolError, match="Failed to fetch and parse PDF: HTTP 404: Not Found"):
        asyncio.run(server.fetch_and_parse_pdf(url="https://example.com/missing.pdf"))


def test_fetch_and_parse_wraps_invalid_pages(captured: list[object]) -> None:
    with pytest.raises(ToolError, match="Failed to fetch and parse PDF"):
        asyncio.run(server.fetch_and_parse_pdf(url="https://example.com/doc.pdf", pages=[0]))
    assert captured == []


def test_vision_tool_keeps_request_defaults(captured: list[object]) -> None:
    report = asyncio.run(server.analyze_pdf_with_vision(url="https://example.com/a.pdf", prompt="Describe"))

    assert report.startswith("# PDF Visual Analysis")
    request = captured[0]
    assert isinstance(request, VisionRequest)
    assert request.max_pages == 20
    assert request.model is None
    assert request.dpi == 150


def test_vision_tool_wraps_backend_errors(monkeypatch, captured: list[object]) -> None:
    async def _failing(request: VisionRequest, *, settings: Settings) -> str:
        raise VisionError(message="OPENAI_API_KEY is required for the vision tool")

    monkeypatch.setattr(server, "fetch_and_analyze_with_vision", _failing)

    with pytest.raises(ToolError, match="Failed to analyze PDF with vision model: OPENAI_API_KEY"):
        asyncio.run(server.analyze_pdf_with_vision(url="https://example.com/a.pdf", prompt="Describe"))


def test_run_server_uses_configured_transport(monkeypatch, settings: Settings) -> None:
    transports: list[str] = []
    monkeypatch.setattr(server.mcp, "run", lambda transport: transports.append(transport))
    monkeypatch.setattr(server, "get_settings", lambda: settings)

    server.run_server(settings)
    server.run_server(settings, transport="sse")

    assert transports == ["stdio", "sse"]
    assert settings.httpx_clients == {}
