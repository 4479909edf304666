from __future__ import annotations

import asyncio
import os
import struct
import zlib
from io import BytesIO

import pytest
from PIL import Image

# product_studio.config refuses to load without a key.
os.environ.setdefault("GEMINI_API_KEY", "test-key")

from product_studio.intake import EncodedImage  # noqa: E402
from product_studio.providers.base import ContentPart  # noqa: E402
from product_studio.studio import Studio  # noqa: E402

DEBOUNCE = 0.05


def image_bytes(size: tuple[int, int] = (8, 8), fmt: str = "PNG", color=(200, 30, 30)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def oversized_png(width: int = 20000, height: int = 20000) -> bytes:
    """A tiny file whose PNG header claims far more pixels than Pillow will open."""

    def chunk(kind: bytes, data: bytes) -> bytes:
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF)

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IDAT", b"") + chunk(b"IEND", b"")


class FakeProvider:
    """
    Records every request. Responses can be scripted per call as
    (delay_seconds, result) where result is a value or an exception.
    """

    name = "fake"

    def __init__(self) -> None:
        self.text_calls: list[list[ContentPart]] = []
        self.image_calls: list[list[ContentPart]] = []
        self.text_call_times: list[float] = []
        self.prompt_text = "A red shoe on white background"
        self.text_script: list[tuple[float, object]] = []
        self.image_parts: list[ContentPart] = [
            ContentPart.from_image(EncodedImage.from_bytes(image_bytes(color=(0, 0, 255)), "image/png"))
        ]
        self.image_error: Exception | None = None
        self.image_delay = 0.0

    async def generate_text(self, parts: list[ContentPart]) -> str:
        self.text_calls.append(parts)
        self.text_call_times.append(asyncio.get_running_loop().time())
        delay, result = self.text_script.pop(0) if self.text_script else (0.0, self.prompt_text)
        if delay:
            await asyncio.sleep(delay)
        if isinstance(result, Exception):
            raise result
        return str(result)

    async def generate_image(self, parts: list[ContentPart]) -> list[ContentPart]:
        self.image_calls.append(parts)
        if self.image_delay:
            await asyncio.sleep(self.image_delay)
        if self.image_error is not None:
            raise self.image_error
        return list(self.image_parts)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def product_image() -> EncodedImage:
    return EncodedImage.from_bytes(image_bytes(fmt="JPEG"), "image/jpeg")


@pytest.fixture
def reference_image() -> EncodedImage:
    return EncodedImage.from_bytes(image_bytes(color=(10, 120, 10)), "image/png")


@pytest.fixture
async def studio(provider: FakeProvider):
    s = Studio(provider, debounce_seconds=DEBOUNCE)
    yield s
    s.close()
