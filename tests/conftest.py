"""Shared fixtures and marker auto-assignment by folder."""

from __future__ import annotations

from pathlib import Path

import pytest

from pdfsight import logger
from pdfsight.settings import Settings

_SETTINGS_ENV_VARS = (
    "APP_ENV",
    "LOG_LEVEL",
    "LOG_JSON",
    "LOG_FILE",
    "HTTP_PROXY",
    "HTTPS_PROXY",
    "ALL_PROXY",
    "NO_PROXY",
    "CERT_PATH",
    "TIMEOUT",
    "MAX_CONNECTIONS",
    "USER_AGENT",
    "MAX_PDF_SIZE_BYTES",
    "DEFAULT_DPI",
    "DEFAULT_MAX_PAGES",
    "HYBRID_MAX_PAGES",
    "RENDER_BATCH_SIZE",
    "TEXT_DENSITY_THRESHOLD",
    "VISUAL_PAGE_THRESHOLD",
    "OPENAI_BASE_URL",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "MCP_TRANSPORT",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove settings-related variables inherited from the developer shell."""
    for name in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def settings(clean_env: pytest.MonkeyPatch) -> Settings:
    """Settings built from defaults only, ignoring any local `.env` file."""
    return Settings(_env_file=None)  # type: ignore[call-arg]


def _build_pdf(
    pages: list[str],
    *,
    metadata: dict[str, str] | None = None,
    encrypt: bool = False,
) -> bytes:
    """Build an A4 document from page specs: `text:<n>`, `image`, `image+text:<n>` or `blank`."""
    import fitz  # noqa: PLC0415

    doc = fitz.open()
    for page_spec in pages:
        page = doc.new_page()
        kind, _, size = page_spec.partition(":")
        if "image" in kind:
            pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, 8, 8), False)
            pix.clear_with(128)
            page.insert_image(fitz.Rect(72, 400, 272, 600), pixmap=pix)
        if size:
            words = ("lorem " * (int(size) // 6 + 1)).split()
            lines = [" ".join(words[index : index + 12]) for index in range(0, len(words), 12)]
            page.insert_text(fitz.Point(40, 60), "\n".join(lines), fontsize=8)
    if metadata:
        doc.set_metadata(metadata)

    if encrypt:
        payload = doc.tobytes(
            encryption=fitz.PDF_ENCRYPT_AES_256,
            owner_pw="owner-secret",  # pragma: allowlist secret
            user_pw="user-secret",  # pragma: allowlist secret
        )
    else:
        payload = doc.tobytes()
    doc.close()
    return payload


@pytest.fixture
def make_pdf():
    """Return a builder for small in-memory PDF documents."""
    return _build_pdf


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = (Path(config.rootpath) / "tests" / marker).resolve()

    for item in items:
        try:
            path = Path(str(item.fspath)).resolve()
        except OSError:
            logger.warning("Could not resolve test path", extra={"test": item.name, "marker": marker})
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    for marker in ("unit", "integration", "end2end"):
        _mark_tests_by_directory(config, items, marker)
