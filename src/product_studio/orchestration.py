from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from product_studio.errors import NoImageProducedError
from product_studio.intake import EncodedImage
from product_studio.prompts import build_image_request, build_prompt_request
from product_studio.providers.base import ContentPart, ImageModel, TextModel
from product_studio.styles import StyleSelection

logger = logging.getLogger(__name__)

PROMPT_FAILED_MESSAGE = "Failed to generate prompt."
MISSING_INPUTS_MESSAGE = "Please upload a product image and ensure a prompt is generated."
IMAGE_FAILED_MESSAGE = "Failed to generate image. Please check the server logs for details."


@dataclass
class StudioStatus:
    prompt_loading: bool = False
    image_loading: bool = False
    # Last failure wins.
    error: str | None = None


class Debouncer:
    """
    Runs the most recently scheduled call once `delay` seconds pass without
    another schedule. Rescheduling cancels a call that is still waiting; a
    call that already started is left to finish.
    """

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self._pending: asyncio.Task[None] | None = None
        self._running: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def schedule(self, factory: Callable[[], Awaitable[None]]) -> None:
        self.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._fire(factory))

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def _fire(self, factory: Callable[[], Awaitable[None]]) -> None:
        await asyncio.sleep(self.delay)
        task = asyncio.current_task()
        # From here on the call is in flight and no longer cancellable by schedule().
        if self._pending is task:
            self._pending = None
        if task is not None:
            self._running.add(task)
        try:
            await factory()
        finally:
            self._running.discard(task)  # type: ignore[arg-type]

    async def wait(self) -> None:
        """Wait until nothing is pending or running."""
        while self.pending or self._running:
            tasks = list(self._running)
            if self._pending is not None:
                tasks.append(self._pending)
            await asyncio.gather(*tasks, return_exceptions=True)

    def close(self) -> None:
        self.cancel()
        for task in list(self._running):
            task.cancel()
        self._running.clear()


class PromptOrchestrator:
    def __init__(
        self,
        provider: TextModel,
        status: StudioStatus,
        on_prompt: Callable[[str], None],
        delay: float = 0.5,
    ) -> None:
        self.provider = provider
        self.status = status
        self.on_prompt = on_prompt
        self.debouncer = Debouncer(delay)
        self._issued = 0

    @property
    def latest_request(self) -> int:
        return self._issued

    def notify(self, selection: StyleSelection, reference: EncodedImage | None) -> None:
        """Style or reference changed: (re)start the quiet period for this snapshot."""
        self.debouncer.schedule(lambda: self.request(selection, reference))

    async def request(self, selection: StyleSelection, reference: EncodedImage | None) -> str | None:
        self._issued += 1
        seq = self._issued
        self.status.prompt_loading = True
        self.status.error = None
        parts = build_prompt_request(selection, reference)
        logger.info(
            "prompt request #%d (%s, reference=%s)",
            seq,
            ", ".join(selection.as_labels().values()),
            reference is not None,
        )
        try:
            text = await self.provider.generate_text(parts)
        except Exception:
            if seq != self._issued:
                logger.info("prompt request #%d failed after being superseded", seq)
                return None
            logger.exception("prompt request #%d failed", seq)
            self.status.error = PROMPT_FAILED_MESSAGE
            return None
        finally:
            if seq == self._issued:
                self.status.prompt_loading = False

        if seq != self._issued:
            logger.debug("discarding stale prompt response #%d (latest is #%d)", seq, self._issued)
            return None
        self.on_prompt(text)
        return text

    def close(self) -> None:
        self.debouncer.close()


def first_inline_image(parts: list[ContentPart]) -> EncodedImage:
    for part in parts:
        if part.image is not None:
            return part.image
    raise NoImageProducedError("No image data found in response")


class ImageOrchestrator:
    def __init__(
        self,
        provider: ImageModel,
        status: StudioStatus,
        on_image: Callable[[str | None], None],
    ) -> None:
        self.provider = provider
        self.status = status
        self.on_image = on_image
        self._issued = 0

    async def generate(
        self,
        product: EncodedImage | None,
        prompt: str,
        reference: EncodedImage | None = None,
    ) -> str | None:
        """
        Returns the generated image's data URI, or None when the inputs were
        missing, the call failed, or a newer request took over.
        """
        if product is None or not prompt:
            self.status.error = MISSING_INPUTS_MESSAGE
            return None

        self._issued += 1
        seq = self._issued
        self.on_image(None)
        self.status.error = None
        self.status.image_loading = True
        logger.info("image request #%d (reference=%s)", seq, reference is not None)
        try:
            parts = await self.provider.generate_image(build_image_request(product, prompt, reference))
            image = first_inline_image(parts)
        except Exception:
            if seq != self._issued:
                logger.info("image request #%d failed after being superseded", seq)
                return None
            logger.exception("image request #%d failed", seq)
            self.status.error = IMAGE_FAILED_MESSAGE
            return None
        finally:
            if seq == self._issued:
                self.status.image_loading = False

        if seq != self._issued:
            logger.debug("discarding stale image response #%d (latest is #%d)", seq, self._issued)
            return None
        self.on_image(image.data_uri)
        return image.data_uri
