from __future__ import annotations


class StudioError(Exception):
    """Base class for errors raised by product_studio."""


class StyleFieldError(StudioError, ValueError):
    """An unknown style field or a value outside the field's options."""


class GenerationError(StudioError):
    """A remote model call failed."""


class PromptGenerationError(GenerationError):
    pass


class ImageGenerationError(GenerationError):
    pass


class NoImageProducedError(ImageGenerationError):
    """The image model answered without any inline image part."""
