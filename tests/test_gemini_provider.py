from __future__ import annotations

from types import SimpleNamespace

import pytest

from product_studio.errors import ImageGenerationError, PromptGenerationError
from product_studio.intake import EncodedImage
from product_studio.providers.base import ContentPart
from product_studio.providers.gemini_provider import GeminiProvider


class FakeModels:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def gemini() -> GeminiProvider:
    return GeminiProvider(api_key="test-key", text_model="text-model", image_model="image-model")


def _install(gemini: GeminiProvider, models: FakeModels) -> None:
    gemini.client = SimpleNamespace(aio=SimpleNamespace(models=models))


def _response(*parts) -> SimpleNamespace:
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


async def test_generate_text_sends_parts_in_order(gemini, reference_image):
    models = FakeModels(response=SimpleNamespace(text="A vivid prompt"))
    _install(gemini, models)
    text = await gemini.generate_text([ContentPart.from_text("hello"), ContentPart.from_image(reference_image)])

    assert text == "A vivid prompt"
    (call,) = models.calls
    assert call["model"] == "text-model"
    sent = call["contents"].parts
    assert sent[0].text == "hello"
    assert sent[1].inline_data.mime_type == "image/png"
    assert sent[1].inline_data.data == reference_image.to_bytes()


async def test_generate_text_wraps_errors(gemini):
    _install(gemini, FakeModels(error=RuntimeError("quota")))
    with pytest.raises(PromptGenerationError):
        await gemini.generate_text([ContentPart.from_text("hello")])


async def test_generate_text_without_text_is_an_error(gemini):
    _install(gemini, FakeModels(response=SimpleNamespace(text=None)))
    with pytest.raises(PromptGenerationError):
        await gemini.generate_text([ContentPart.from_text("hello")])


async def test_generate_image_requests_image_modality(gemini, product_image):
    png = b"\x89PNG\r\n\x1a\nfake"
    response = _response(
        SimpleNamespace(inline_data=None, text="Here is your shot"),
        SimpleNamespace(inline_data=SimpleNamespace(data=png, mime_type="image/png"), text=None),
    )
    models = FakeModels(response=response)
    _install(gemini, models)

    parts = await gemini.generate_image([ContentPart.from_image(product_image), ContentPart.from_text("prompt")])

    (call,) = models.calls
    assert call["model"] == "image-model"
    assert [m.upper() for m in call["config"].response_modalities] == ["IMAGE"]
    assert parts[0].text == "Here is your shot"
    assert parts[1].image == EncodedImage.from_bytes(png, "image/png")


async def test_generate_image_with_no_candidates(gemini, product_image):
    _install(gemini, FakeModels(response=SimpleNamespace(candidates=None)))
    assert await gemini.generate_image([ContentPart.from_image(product_image)]) == []


async def test_generate_image_wraps_errors(gemini, product_image):
    _install(gemini, FakeModels(error=ConnectionError("reset")))
    with pytest.raises(ImageGenerationError):
        await gemini.generate_image([ContentPart.from_image(product_image)])
