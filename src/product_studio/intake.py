from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Any

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncodedImage:
    payload: str  # base64, no data-URI prefix
    media_type: str

    @property
    def data_uri(self) -> str:
        return f"data:{self.media_type};base64,{self.payload}"

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.payload)

    @classmethod
    def from_bytes(cls, content: bytes, media_type: str) -> EncodedImage:
        return cls(payload=base64.b64encode(content).decode("ascii"), media_type=media_type)


def is_image_type(content_type: str | None) -> bool:
    return bool(content_type) and content_type.strip().lower().startswith("image/")


def encode_image(content: bytes | None, content_type: str | None) -> EncodedImage | None:
    """
    Turn raw upload bytes into an EncodedImage.

    Only the declared content type is checked; anything that does not claim
    to be an image (or has no content) yields None.
    """
    if content is None or not is_image_type(content_type):
        return None
    return EncodedImage.from_bytes(content, content_type.strip())


async def read_upload(upload: Any | None) -> EncodedImage | None:
    """
    Read a FastAPI UploadFile into an EncodedImage.

    Read failures are logged and reported the same way as "no file": the
    caller decides whether to tell the user anything.
    """
    if upload is None or not is_image_type(getattr(upload, "content_type", None)):
        return None
    try:
        content = await upload.read()
    except Exception:
        logger.exception("failed to read upload %r", getattr(upload, "filename", None))
        return None
    return encode_image(content, upload.content_type)


def make_preview(image: EncodedImage, max_edge: int = 512) -> str:
    """
    Data URI for showing an upload right away, independent of what gets sent
    to the models. Falls back to the image itself when Pillow can't decode it.
    """
    try:
        raw = image.to_bytes()
        with Image.open(BytesIO(raw)) as img:
            if max(img.size) <= max_edge:
                return image.data_uri
            thumb = img.convert("RGBA") if img.mode in ("P", "LA") else img.copy()
            thumb.thumbnail((max_edge, max_edge))
            buf = BytesIO()
            if thumb.mode in ("RGBA", "LA"):
                thumb.save(buf, format="PNG")
                media_type = "image/png"
            else:
                thumb.convert("RGB").save(buf, format="JPEG", quality=85)
                media_type = "image/jpeg"
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, binascii.Error, ValueError):
        logger.debug("preview fallback for %s upload", image.media_type)
        return image.data_uri
    return EncodedImage.from_bytes(buf.getvalue(), media_type).data_uri


def decode_data_uri(data_uri: str) -> EncodedImage | None:
    """Inverse of EncodedImage.data_uri; None for anything that isn't a base64 data URI."""
    if not data_uri.startswith("data:") or ";base64," not in data_uri:
        return None
    header, payload = data_uri[len("data:") :].split(";base64,", 1)
    return EncodedImage(payload=payload, media_type=header or "application/octet-stream")
