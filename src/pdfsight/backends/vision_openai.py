"""OpenAI-compatible vision backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import openai

from pdfsight.exceptions import VisionError
from pdfsight.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pdfsight.settings import Settings
    from pdfsight.typing.models import RenderedPage

logger = get_logger(__name__)


class VisionBackend:
    """Forward rendered pages and a prompt to a vision-capable chat model."""

    def __init__(self, settings: Settings) -> None:
        """Initialize backend.

        Args:
            settings (Settings): Runtime settings.
        """
        self._settings = settings

    def _client(self) -> openai.AsyncOpenAI:
        """Build an async OpenAI client over the shared HTTPX client.

        Raises:
            VisionError: If the API key is not configured.

        Returns:
            openai.AsyncOpenAI: Configured client.
        """
        if not self._settings.openai_api_key:
            raise VisionError(message="OPENAI_API_KEY is required for the vision tool")

        target_url = self._settings.openai_base_url or "https://api.openai.com/v1"
        return openai.AsyncOpenAI(
            api_key=self._settings.openai_api_key,
            base_url=self._settings.openai_base_url,
            http_client=self._settings.select_async_httpx_client(target_url),
        )

    @staticmethod
    def _image_content(page: RenderedPage) -> dict[str, Any]:
        """Build image content chunk.

        Args:
            page (RenderedPage): Rendered page.

        Returns:
            dict[str, Any]: OpenAI content block.
        """
        return {"type": "image_url", "image_url": {"url": page.data_uri}}

    async def analyze(self, pages: Sequence[RenderedPage], prompt: str, *, model: str | None = None) -> str:
        """Ask the model about the rendered pages.

        Args:
            pages (Sequence[RenderedPage]): Rendered pages, in document order.
            prompt (str): User prompt.
            model (str | None): Model override; defaults to `OPENAI_MODEL`.

        Raises:
            VisionError: If there are no pages or the request fails.

        Returns:
            str: The model's textual answer, unmodified.
        """
        if not pages:
            raise VisionError(message="No pages were rendered from the PDF")

        content: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
        content.extend(self._image_content(page) for page in pages)
        model_name = model or self._settings.openai_model

        client = self._client()
        try:
            completion = await client.chat.completions.create(
                model=model_name,
                messages=[{"role": "user", "content": content}],
            )
        except openai.APIStatusError as exc:
            raise VisionError(message=f"Vision request failed with status {exc.status_code}") from exc
        except openai.APITimeoutError as exc:
            raise VisionError(message="Vision request timed out") from exc
        except openai.OpenAIError as exc:
            raise VisionError(message=f"Vision request failed: {exc}") from exc

        text = completion.choices[0].message.content if completion.choices else None
        if text is None:
            raise VisionError(message="Vision model returned an empty response")

        usage = completion.usage
        logger.info(
            "Vision analysis complete",
            extra={
                "model": model_name,
                "pages": len(pages),
                "characters": len(text),
                "input_tokens": usage.prompt_tokens if usage else None,
                "output_tokens": usage.completion_tokens if usage else None,
            },
        )
        return text
