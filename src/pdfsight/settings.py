"""Runtime settings loaded from `.env` and environment variables."""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import ssl
from functools import lru_cache
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
from pydantic import Field, PrivateAttr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pdfsight.exceptions import SettingsError

NoProxyNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network
MCP_TRANSPORTS = ("stdio", "sse", "streamable-http")
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Runtime settings for fetching, rendering and serving."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(
        default="dev",
        validation_alias="APP_ENV",
        description="Deployment label, e.g. 'dev' or 'prod'.",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Minimum log level; DEBUG also shows per-batch render logs.",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Render logs as JSON lines instead of console text.",
    )
    log_file: str | None = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="Optional file receiving a copy of the stderr logs.",
    )
    http_proxy: str | None = Field(
        default=None,
        validation_alias="HTTP_PROXY",
        description="Proxy for plain HTTP document downloads.",
    )
    https_proxy: str | None = Field(
        default=None,
        validation_alias="HTTPS_PROXY",
        description="Proxy for HTTPS downloads and vision API calls.",
    )
    all_proxy: str | None = Field(
        default=None,
        validation_alias="ALL_PROXY",
        description="Fallback proxy when no scheme proxy is set.",
    )
    no_proxy: str | None = Field(
        default=None,
        validation_alias="NO_PROXY",
        description="Hosts, domain suffixes or CIDR ranges reached without proxy.",
    )

    cert_path: str | None = Field(
        default=None,
        validation_alias="CERT_PATH",
        description="CA bundle used to verify document and API servers.",
    )
    timeout: float = Field(
        default=30.0,
        validation_alias="TIMEOUT",
        description="Overall time limit for one document download, in seconds.",
    )
    max_connections: int = Field(
        default=20,
        validation_alias="MAX_CONNECTIONS",
        description="Connection pool size shared by concurrent tool calls.",
    )

    max_pdf_size_bytes: int = Field(
        default=50 * 1024 * 1024,
        ge=1,
        validation_alias="MAX_PDF_SIZE_BYTES",
        description="Maximum accepted size of a downloaded PDF.",
    )
    user_agent: str = Field(
        default="Mozilla/5.0 (compatible; pdfsight/0.1.0)",
        validation_alias="USER_AGENT",
        description="User-Agent header sent when fetching documents.",
    )

    default_dpi: int = Field(
        default=150,
        ge=72,
        le=300,
        validation_alias="DEFAULT_DPI",
        description="Render DPI used when a request does not set one.",
    )
    default_max_pages: int = Field(
        default=50,
        ge=1,
        le=100,
        validation_alias="DEFAULT_MAX_PAGES",
        description="Page cap used when a request does not set one.",
    )
    hybrid_max_pages: int = Field(
        default=10,
        ge=1,
        validation_alias="HYBRID_MAX_PAGES",
        description="Ceiling on auto-selected pages rendered in hybrid mode.",
    )
    render_batch_size: int = Field(
        default=5,
        ge=1,
        validation_alias="RENDER_BATCH_SIZE",
        description="Number of pages rendered concurrently per batch.",
    )
    text_density_threshold: float = Field(
        default=500.0,
        gt=0,
        validation_alias="TEXT_DENSITY_THRESHOLD",
        description="Average characters per page above which a document is text-heavy.",
    )
    visual_page_threshold: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        validation_alias="VISUAL_PAGE_THRESHOLD",
        description="Minimum ratio of visual pages to recommend hybrid mode.",
    )

    openai_base_url: str | None = Field(
        default=None,
        validation_alias="OPENAI_BASE_URL",
        description="Base URL for an OpenAI-compatible API.",
    )
    openai_api_key: str | None = Field(
        default=None,
        validation_alias="OPENAI_API_KEY",
        description="API key enabling the vision tool.",
    )
    openai_model: str = Field(
        default="gpt-4o",
        validation_alias="OPENAI_MODEL",
        description="Vision-capable model used by the vision tool.",
    )

    mcp_transport: str = Field(
        default="stdio",
        validation_alias="MCP_TRANSPORT",
        description="MCP transport: 'stdio', 'sse' or 'streamable-http'.",
    )
    _no_proxy_hosts: tuple[str, ...] = PrivateAttr(default=())
    _no_proxy_networks: tuple[NoProxyNetwork, ...] = PrivateAttr(default=())
    _httpx_clients: dict[str, httpx.AsyncClient] = PrivateAttr(default_factory=dict)

    @field_validator("mcp_transport")
    @classmethod
    def _validate_mcp_transport(cls, value: str) -> str:
        """Ensure the MCP transport is one the server can run.

        Args:
            value (str): Raw transport name.

        Raises:
            ValueError: If the transport is not supported.

        Returns:
            str: Normalized transport name.
        """
        normalized = value.strip().lower()
        if normalized not in MCP_TRANSPORTS:
            message = f"MCP_TRANSPORT must be one of: {', '.join(MCP_TRANSPORTS)}"
            raise ValueError(message)
        return normalized

    def model_post_init(self, __context: object, /) -> None:
        """Initialize derived runtime settings."""
        self._no_proxy_hosts, self._no_proxy_networks = parse_no_proxy(self.no_proxy)
        self._initialize_httpx_clients()

    @property
    def no_proxy_hosts(self) -> tuple[str, ...]:
        """Return normalized NO_PROXY host suffixes."""
        return self._no_proxy_hosts

    @property
    def no_proxy_networks(self) -> tuple[NoProxyNetwork, ...]:
        """Return parsed NO_PROXY CIDR networks."""
        return self._no_proxy_networks

    @property
    def httpx_clients(self) -> dict[str, httpx.AsyncClient]:
        """Return cached HTTPX clients."""
        return self._httpx_clients

    def should_bypass_proxy(self, target_url: str | None) -> bool:
        """Return whether the URL should bypass proxies."""
        return _is_no_proxy_target(target_url, self)

    def select_async_httpx_client(self, target_url: str | None) -> httpx.AsyncClient | None:
        """Return async HTTPX client selected for target URL."""
        if not self._httpx_clients:
            return None
        if self.should_bypass_proxy(target_url):
            return self._httpx_clients["no_proxy"]
        return self._httpx_clients["proxy"]

    def _initialize_httpx_clients(self) -> None:
        """Create and cache async HTTPX clients for proxy and no-proxy paths."""
        limits = httpx.Limits(max_connections=self.max_connections)
        self._httpx_clients = {
            "proxy": httpx.AsyncClient(
                **build_httpx_client_kwargs(self),
                limits=limits,
                follow_redirects=True,
            ),
            "no_proxy": httpx.AsyncClient(
                **build_httpx_client_kwargs(self, force_no_proxy=True),
                limits=limits,
                follow_redirects=True,
            ),
        }

    def close_httpx_clients(self) -> None:
        """Close cached HTTPX clients from a sync context (best effort)."""
        if not self._httpx_clients:
            return

        clients = tuple(self._httpx_clients.items())
        self._httpx_clients = {}
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._aclose_clients(clients))
            return
        logger.warning("close_httpx_clients called inside a running loop; use aclose_httpx_clients")

    async def aclose_httpx_clients(self) -> None:
        """Asynchronously close cached HTTPX clients."""
        if not self._httpx_clients:
            return

        clients = tuple(self._httpx_clients.items())
        self._httpx_clients = {}
        await self._aclose_clients(clients)

    @staticmethod
    async def _aclose_clients(clients: tuple[tuple[str, httpx.AsyncClient], ...]) -> None:
        """Close async HTTPX clients with best effort."""
        for key, client in clients:
            try:
                await client.aclose()
            except Exception:
                logger.warning("Failed to close async HTTPX client", extra={"client_key": key})


def build_ssl_context(settings: Settings) -> ssl.SSLContext:
    """Build a strict SSL context from settings.

    Args:
        settings (Settings): Runtime settings.

    Returns:
        ssl.SSLContext: Configured TLS context.
    """
    ssl_context = ssl.create_default_context(cafile=settings.cert_path)
    ssl_context.verify_mode = ssl.CERT_REQUIRED
    ssl_context.minimum_version = ssl.TLSVersion.TLSv1_2
    return ssl_context


def parse_no_proxy(no_proxy: str | None) -> tuple[tuple[str, ...], tuple[NoProxyNetwork, ...]]:
    """Split NO_PROXY into host suffixes and CIDR networks.

    Entries such as `.example.com`, `example.com` and `http://example.com:8080`
    all normalize to the host suffix `example.com`. A bare `*` becomes the
    wildcard host entry.

    Args:
        no_proxy (str | None): Raw NO_PROXY value.

    Returns:
        tuple[tuple[str, ...], tuple[NoProxyNetwork, ...]]: Host suffixes and networks.
    """
    hosts: list[str] = []
    networks: list[NoProxyNetwork] = []
    for raw in (no_proxy or "").split(","):
        entry = raw.strip().lower()
        if not entry:
            continue
        try:
            networks.append(ipaddress.ip_network(entry, strict=False))
            continue
        except ValueError:
            pass
        parsed = urlparse(entry if "://" in entry else f"//{entry}")
        host = (parsed.hostname or entry).strip("[]").removeprefix("*").removeprefix(".")
        hosts.append(host or "*")
    return tuple(hosts), tuple(networks)


def _is_no_proxy_target(target_url: str | None, settings: Settings) -> bool:
    """Return whether the target URL should bypass proxies.

    Args:
        target_url (str | None): Target request URL.
        settings (Settings): Runtime settings.

    Returns:
        bool: True when proxy must be bypassed.
    """
    if not target_url:
        return False

    hostname = urlparse(target_url).hostname
    if not hostname:
        return False

    host = hostname.lower().strip("[]")
    for suffix in settings.no_proxy_hosts:
        if suffix == "*" or host == suffix or host.endswith(f".{suffix}"):
            return True

    try:
        host_ip = ipaddress.ip_address(host)
    except ValueError:
        return False
    return any(host_ip in network for network in settings.no_proxy_networks)


def build_httpx_client_kwargs(
    settings: Settings,
    *,
    target_url: str | None = None,
    force_no_proxy: bool = False,
) -> dict[str, Any]:
    """Build kwargs used for `httpx.Client` and `httpx.AsyncClient`.

    Args:
        settings (Settings): Runtime settings.
        target_url (str | None): Optional target URL used for NO_PROXY evaluation.
        force_no_proxy (bool): If true, always build kwargs without proxy.

    Returns:
        dict[str, Any]: Arguments for client constructors.
    """
    proxy_url = settings.https_proxy or settings.http_proxy or settings.all_proxy

    kwargs: dict[str, Any] = {
        "verify": build_ssl_context(settings),
        "timeout": settings.timeout,
    }

    should_bypass = force_no_proxy or _is_no_proxy_target(target_url, settings)
    if proxy_url and not should_bypass:
        kwargs["proxy"] = proxy_url

    return kwargs


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance.

    Raises:
        SettingsError: If settings cannot be loaded or validated.

    Returns:
        Settings: The loaded settings instance.
    """
    try:
        return Settings()
    except Exception as exc:
        if _is_missing_settings_error(exc):
            try:
                ensure_env_file_exists()
                return Settings()
            except Exception as retry_exc:
                raise SettingsError(exc=retry_exc) from retry_exc
        raise SettingsError(exc=exc) from exc


def ensure_env_file_exists(
    *,
    env_path: Path = Path(".env"),
    template_path: Path = Path(".env.template"),
) -> None:
    """Create `.env` from template when missing.

    Args:
        env_path (Path): Target environment file path.
        template_path (Path): Template file path.
    """
    if env_path.exists() or not template_path.exists():
        return
    env_path.write_text(template_path.read_text(encoding="utf-8"), encoding="utf-8")
    logger.info(
        "Created environment file from template",
        extra={"env_path": str(env_path), "template_path": str(template_path)},
    )


def _is_missing_settings_error(exc: Exception) -> bool:
    """Return whether the settings failure is due to missing values.

    Args:
        exc (Exception): Caught settings initialization error.

    Returns:
        bool: True when the error represents missing settings values.
    """
    if not isinstance(exc, ValidationError):
        return False
    return any(error.get("type") == "missing" for error in exc.errors())
