from __future__ import annotations

from product_studio.intake import EncodedImage
from product_studio.providers.base import ContentPart
from product_studio.styles import StyleSelection

PROMPT_TASK_INTRO = (
    "Generate a super-detailed, professional photography prompt for an AI image generator. "
    "The goal is to create a photorealistic shot of a product."
)

_OUTPUT_RULES = (
    "The final prompt should be a single, cohesive paragraph that describes the desired image in vivid detail. "
    "Do not add any conversational text, just output the prompt itself."
)

WITH_REFERENCE_TASK = (
    " and the style of the provided reference image, create a prompt. "
    "Describe the reference image's key visual elements (e.g., color palette, mood, textures, composition, background) "
    "and incorporate them into the final prompt. " + _OUTPUT_RULES
)

WITHOUT_REFERENCE_TASK = ", create a prompt. " + _OUTPUT_RULES


def build_prompt_request(selection: StyleSelection, reference: EncodedImage | None = None) -> list[ContentPart]:
    """
    Parts for the text model: fixed task text, one labelled line per style
    directive, then task instructions. The reference image, when given, goes
    last as its own inline part.
    """
    texts = [
        PROMPT_TASK_INTRO,
        "\n**Key Directives:**\n",
        f"- Aspect Ratio: {selection.aspect_ratio.value}\n",
        f"- Lighting Style: {selection.lighting_style.value}\n",
        f"- Camera Perspective: {selection.camera_perspective.value}\n",
        "\n**Task:**\n",
        "Based on the directives above",
        WITH_REFERENCE_TASK if reference is not None else WITHOUT_REFERENCE_TASK,
    ]
    parts = [ContentPart.from_text(t) for t in texts]
    if reference is not None:
        parts.append(ContentPart.from_image(reference))
    return parts


def build_image_request(
    product: EncodedImage,
    prompt: str,
    reference: EncodedImage | None = None,
) -> list[ContentPart]:
    # Order matters: product, prompt, then the optional style reference.
    parts = [ContentPart.from_image(product), ContentPart.from_text(prompt)]
    if reference is not None:
        parts.append(ContentPart.from_image(reference))
    return parts
