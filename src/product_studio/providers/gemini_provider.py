from __future__ import annotations

import logging
from typing import Any

from product_studio.errors import ImageGenerationError, PromptGenerationError
from product_studio.intake import EncodedImage
from product_studio.providers.base import ContentPart

logger = logging.getLogger(__name__)


class GeminiProvider:
    name = "gemini"

    def __init__(self, api_key: str, text_model: str, image_model: str) -> None:
        # Imported lazily so the app can start without the dependency installed.
        from google import genai  # type: ignore
        from google.genai import types  # type: ignore

        self._types = types
        self.client = genai.Client(api_key=api_key)
        self.text_model = text_model
        self.image_model = image_model

    async def generate_text(self, parts: list[ContentPart]) -> str:
        """
        Single-shot text generation. No retry, no timeout: failures go
        straight to the caller as PromptGenerationError.
        """
        try:
            resp = await self.client.aio.models.generate_content(
                model=self.text_model,
                contents=self._to_content(parts),
            )
        except Exception as exc:
            raise PromptGenerationError(f"{self.text_model} request failed: {exc}") from exc

        text: str | None = getattr(resp, "text", None)
        if text is None:
            raise PromptGenerationError(f"{self.text_model} returned no text")
        return text

    async def generate_image(self, parts: list[ContentPart]) -> list[ContentPart]:
        """
        Ask the image model for image-only output and hand back the first
        candidate's parts. Picking the image out of them is the caller's job.
        """
        types = self._types
        try:
            resp = await self.client.aio.models.generate_content(
                model=self.image_model,
                contents=self._to_content(parts),
                config=types.GenerateContentConfig(response_modalities=["IMAGE"]),
            )
        except Exception as exc:
            raise ImageGenerationError(f"{self.image_model} request failed: {exc}") from exc
        return _parts_from_response(resp)

    def _to_content(self, parts: list[ContentPart]) -> Any:
        types = self._types
        out: list[Any] = []
        for part in parts:
            if part.image is not None:
                out.append(types.Part.from_bytes(data=part.image.to_bytes(), mime_type=part.image.media_type))
            else:
                out.append(types.Part.from_text(text=part.text or ""))
        return types.Content(role="user", parts=out)


def _parts_from_response(resp: Any) -> list[ContentPart]:
    candidates = getattr(resp, "candidates", None) or []
    if not candidates:
        return []
    content = getattr(candidates[0], "content", None)
    out: list[ContentPart] = []
    for part in getattr(content, "parts", None) or []:
        inline = getattr(part, "inline_data", None)
        data = getattr(inline, "data", None) if inline else None
        if data:
            mime = getattr(inline, "mime_type", None) or "image/png"
            out.append(ContentPart.from_image(EncodedImage.from_bytes(data, mime)))
            continue
        text = getattr(part, "text", None)
        if text:
            out.append(ContentPart.from_text(text))
    logger.debug("image model returned %d part(s)", len(out))
    return out
