from __future__ import annotations

from product_studio.prompts import build_image_request, build_prompt_request
from product_studio.styles import AspectRatio, StyleSelection


def _text(parts) -> str:
    return "".join(p.text for p in parts if p.text is not None)


def test_prompt_request_without_reference():
    parts = build_prompt_request(StyleSelection())
    assert all(p.image is None for p in parts)
    text = _text(parts)
    assert text.startswith("Generate a super-detailed, professional photography prompt")
    assert "- Aspect Ratio: 1:1\n" in text
    assert "- Lighting Style: Studio Light\n" in text
    assert "- Camera Perspective: Eye-level Shot\n" in text
    assert "Based on the directives above, create a prompt." in text
    assert "reference image" not in text


def test_prompt_request_with_reference(reference_image):
    selection = StyleSelection().replace("aspect_ratio", AspectRatio.LANDSCAPE)
    parts = build_prompt_request(selection, reference_image)
    assert parts[-1].image == reference_image
    assert sum(1 for p in parts if p.image is not None) == 1
    text = _text(parts)
    assert "- Aspect Ratio: 16:9\n" in text
    assert "and the style of the provided reference image" in text
    assert "color palette, mood, textures, composition, background" in text


def test_image_request_order(product_image, reference_image):
    parts = build_image_request(product_image, "a prompt", reference_image)
    assert [p.image for p in parts] == [product_image, None, reference_image]
    assert parts[1].text == "a prompt"

    parts = build_image_request(product_image, "a prompt")
    assert len(parts) == 2
