from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel

from product_studio.intake import EncodedImage, make_preview
from product_studio.orchestration import ImageOrchestrator, PromptOrchestrator, StudioStatus
from product_studio.providers.base import StudioProvider
from product_studio.styles import StyleSelection, StyleState

logger = logging.getLogger(__name__)

SLOTS = ("product", "style_reference")


class StudioView(BaseModel):
    style: dict[str, str]
    product_preview: str | None = None
    style_reference_preview: str | None = None
    prompt: str = ""
    generated_image: str | None = None
    prompt_loading: bool = False
    image_loading: bool = False
    error: str | None = None
    can_generate: bool = False


class Studio:
    """
    One user's working session: the two image slots, the style choices, the
    current prompt and result, and the loading/error flags.

    The studio owns all state. Orchestrators read what they are handed and
    write back through callbacks.
    """

    def __init__(
        self,
        provider: StudioProvider,
        debounce_seconds: float = 0.5,
        preview_max_edge: int = 512,
    ) -> None:
        self.provider = provider
        self.preview_max_edge = preview_max_edge
        self.status = StudioStatus()
        self.style = StyleState()
        self.product_image: EncodedImage | None = None
        self.style_reference: EncodedImage | None = None
        self.previews: dict[str, str | None] = {slot: None for slot in SLOTS}
        self.prompt = ""
        self.generated_image: str | None = None

        self.prompts = PromptOrchestrator(provider, self.status, self._set_prompt, delay=debounce_seconds)
        self.images = ImageOrchestrator(provider, self.status, self._set_generated_image)

    @property
    def selection(self) -> StyleSelection:
        return self.style.selection

    @property
    def can_generate(self) -> bool:
        return not self.status.image_loading and self.product_image is not None and bool(self.prompt)

    def start(self) -> None:
        # A first prompt is requested for the default styles, like any other change.
        self._styles_changed()

    def set_image(self, slot: str, image: EncodedImage | None) -> None:
        if slot == "product":
            self.set_product_image(image)
        elif slot == "style_reference":
            self.set_style_reference(image)
        else:
            raise KeyError(slot)

    def set_product_image(self, image: EncodedImage | None) -> None:
        preview = self._preview(image)
        self.product_image = image
        self.previews["product"] = preview

    def set_style_reference(self, image: EncodedImage | None) -> None:
        if image is None and self.style_reference is None:
            return
        preview = self._preview(image)
        self.style_reference = image
        self.previews["style_reference"] = preview
        self._styles_changed()

    def update_style(self, field: str, value: Enum | str) -> StyleSelection:
        selection = self.style.update(field, value)
        logger.debug("style %s -> %s", field, getattr(selection, field).value)
        self._styles_changed()
        return selection

    async def generate_image(self) -> str | None:
        return await self.images.generate(self.product_image, self.prompt, self.style_reference)

    def snapshot(self) -> StudioView:
        return StudioView(
            style=self.selection.as_labels(),
            product_preview=self.previews["product"],
            style_reference_preview=self.previews["style_reference"],
            prompt=self.prompt,
            generated_image=self.generated_image,
            prompt_loading=self.status.prompt_loading,
            image_loading=self.status.image_loading,
            error=self.status.error,
            can_generate=self.can_generate,
        )

    def close(self) -> None:
        self.prompts.close()

    def _styles_changed(self) -> None:
        self.prompts.notify(self.selection, self.style_reference)

    def _preview(self, image: EncodedImage | None) -> str | None:
        return make_preview(image, self.preview_max_edge) if image is not None else None

    def _set_prompt(self, text: str) -> None:
        self.prompt = text

    def _set_generated_image(self, data_uri: str | None) -> None:
        self.generated_image = data_uri
