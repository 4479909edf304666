from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum

from product_studio.errors import StyleFieldError


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    PORTRAIT = "9:16"
    LANDSCAPE = "16:9"
    PHOTO_PORTRAIT = "3:4"
    PHOTO_LANDSCAPE = "4:3"


class LightingStyle(str, Enum):
    STUDIO = "Studio Light"
    NATURAL = "Natural Light"
    DRAMATIC = "Dramatic, High-contrast"
    CINEMATIC = "Cinematic, Moody"
    SOFT = "Soft, Diffused Light"
    VIBRANT = "Vibrant, Colorful"


class CameraPerspective(str, Enum):
    EYE_LEVEL = "Eye-level Shot"
    HIGH_ANGLE = "High-angle Shot"
    LOW_ANGLE = "Low-angle Shot"
    CLOSE_UP = "Macro, Close-up Shot"
    DUTCH_ANGLE = "Dutch Angle Shot"
    TOP_DOWN = "Top-down, Flat Lay"


STYLE_FIELDS: dict[str, type[Enum]] = {
    "aspect_ratio": AspectRatio,
    "lighting_style": LightingStyle,
    "camera_perspective": CameraPerspective,
}

# Select options for the page, in display order.
STYLE_OPTIONS: dict[str, list[str]] = {name: [m.value for m in enum] for name, enum in STYLE_FIELDS.items()}

STYLE_LABELS: dict[str, str] = {
    "aspect_ratio": "Aspect Ratio",
    "lighting_style": "Lighting Style",
    "camera_perspective": "Camera Perspective",
}


def coerce_style_value(field: str, value: Enum | str) -> Enum:
    enum = STYLE_FIELDS.get(field)
    if enum is None:
        raise StyleFieldError(f"unknown style field '{field}'")
    if isinstance(value, enum):
        return value
    try:
        return enum(value)
    except ValueError:
        raise StyleFieldError(f"'{value}' is not a valid {STYLE_LABELS[field].lower()}") from None


@dataclass(frozen=True)
class StyleSelection:
    aspect_ratio: AspectRatio = AspectRatio.SQUARE
    lighting_style: LightingStyle = LightingStyle.STUDIO
    camera_perspective: CameraPerspective = CameraPerspective.EYE_LEVEL

    def replace(self, field: str, value: Enum | str) -> StyleSelection:
        """Copy with exactly one field swapped; raises StyleFieldError on bad input."""
        return dataclasses.replace(self, **{field: coerce_style_value(field, value)})

    def as_labels(self) -> dict[str, str]:
        return {name: getattr(self, name).value for name in STYLE_FIELDS}


class StyleState:
    def __init__(self, selection: StyleSelection | None = None) -> None:
        self.selection = selection or StyleSelection()

    def update(self, field: str, value: Enum | str) -> StyleSelection:
        self.selection = self.selection.replace(field, value)
        return self.selection
