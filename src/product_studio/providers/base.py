from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from product_studio.intake import EncodedImage


@dataclass(frozen=True)
class ContentPart:
    # Exactly one of text / image is set.
    text: str | None = None
    image: EncodedImage | None = None

    @classmethod
    def from_text(cls, text: str) -> ContentPart:
        return cls(text=text)

    @classmethod
    def from_image(cls, image: EncodedImage) -> ContentPart:
        return cls(image=image)


class TextModel(Protocol):
    name: str

    async def generate_text(self, parts: list[ContentPart]) -> str: ...


class ImageModel(Protocol):
    name: str

    async def generate_image(self, parts: list[ContentPart]) -> list[ContentPart]: ...


class StudioProvider(TextModel, ImageModel, Protocol):
    """What the studio needs from one backend: both text and image generation."""
