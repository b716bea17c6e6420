"""Download PDF documents over HTTP(S) with size and time limits."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from urllib.parse import urlparse

import httpx

from pdfsight.exceptions import FetchError, InvalidURLError
from pdfsight.logging import get_logger

if TYPE_CHECKING:
    from pdfsight.settings import Settings

logger = get_logger(__name__)

_ALLOWED_SCHEMES = frozenset({"http", "https"})
_PDF_CONTENT_TYPE = "application/pdf"


def validate_url(url: str) -> str:
    """Check that a URL is an absolute HTTP(S) URL.

    Args:
        url (str): Candidate URL.

    Raises:
        InvalidURLError: If the URL is malformed or not HTTP(S).

    Returns:
        str: The URL, stripped of surrounding whitespace.
    """
    candidate = url.strip()
    try:
        parsed = urlparse(candidate)
    except ValueError as exc:
        raise InvalidURLError(url=url, reason=str(exc)) from exc
    if parsed.scheme.lower() not in _ALLOWED_SCHEMES:
        raise InvalidURLError(url=url, reason="Only HTTP and HTTPS protocols are supported")
    if not parsed.hostname:
        raise InvalidURLError(url=url, reason="URL has no host")
    return candidate


def _check_declared_size(response: httpx.Response, max_size_bytes: int) -> None:
    """Reject responses whose Content-Length already exceeds the limit.

    Args:
        response (httpx.Response): Streaming response.
        max_size_bytes (int): Maximum accepted body size.

    Raises:
        FetchError: If the declared size is above the limit.
    """
    declared = response.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_size_bytes:
        raise FetchError(
            message=f"PDF size ({declared} bytes) exceeds maximum allowed size ({max_size_bytes} bytes)",
        )


def _warn_on_content_type(response: httpx.Response, url: str) -> None:
    content_type = response.headers.get("content-type")
    if content_type and _PDF_CONTENT_TYPE not in content_type.lower():
        logger.warning(
            "Unexpected content type, expected application/pdf",
            extra={"url": url, "content_type": content_type},
        )


async def _download(
    client: httpx.AsyncClient,
    url: str,
    *,
    max_size_bytes: int,
    user_agent: str,
) -> bytes:
    """Stream the response body, stopping as soon as it grows past the limit.

    Args:
        client (httpx.AsyncClient): HTTP client.
        url (str): Document URL.
        max_size_bytes (int): Maximum accepted body size.
        user_agent (str): User-Agent header value.

    Raises:
        FetchError: On non-2xx status or oversize body.

    Returns:
        bytes: Response body.
    """
    async with client.stream("GET", url, headers={"User-Agent": user_agent}) as response:
        if not response.is_success:
            raise FetchError(message=f"HTTP {response.status_code}: {response.reason_phrase}")
        _warn_on_content_type(response, url)
        _check_declared_size(response, max_size_bytes)

        body = bytearray()
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > max_size_bytes:
                raise FetchError(
                    message=f"PDF size exceeds maximum allowed size ({max_size_bytes} bytes)",
                )
        return bytes(body)


async def fetch_pdf(
    url: str,
    *,
    settings: Settings,
    max_size_bytes: int | None = None,
    timeout_s: float | None = None,
) -> bytes:
    """Fetch a PDF document.

    Args:
        url (str): Document URL.
        settings (Settings): Runtime settings providing HTTP clients and defaults.
        max_size_bytes (int | None): Size limit; defaults to `MAX_PDF_SIZE_BYTES`.
        timeout_s (float | None): Overall time limit; defaults to `TIMEOUT`.

    Raises:
        FetchError: If the download fails, times out or is too large.

    Returns:
        bytes: Raw document bytes.
    """
    target = validate_url(url)
    limit = max_size_bytes or settings.max_pdf_size_bytes
    timeout = timeout_s or settings.timeout

    client = settings.select_async_httpx_client(target)
    if client is None:
        raise FetchError(message="HTTP clients are not initialized in settings")

    logger.info("Fetching PDF", extra={"url": target})
    try:
        async with asyncio.timeout(timeout):
            pdf_bytes = await _download(client, target, max_size_bytes=limit, user_agent=settings.user_agent)
    except TimeoutError as exc:
        raise FetchError(message=f"Request timeout after {timeout:g}s") from exc
    except httpx.TimeoutException as exc:
        raise FetchError(message=f"Request timeout after {timeout:g}s") from exc
    except httpx.HTTPError as exc:
        raise FetchError(message=f"Request failed: {exc}") from exc

    logger.info("PDF fetched", extra={"url": target, "bytes": len(pdf_bytes)})
    return pdf_bytes
