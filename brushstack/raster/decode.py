from __future__ import annotations

import asyncio
from dataclasses import dataclass
import io
import logging
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from brushstack.errors import PrerequisiteError


LOGGER = logging.getLogger(__name__)

ImageSource = str | Path | bytes


@dataclass(frozen=True)
class DecodedImage:
    rgba: np.ndarray
    width: int
    height: int


def decode_image(source: ImageSource) -> DecodedImage:
    """Decode `source` (a path or encoded bytes) into an RGBA uint8 array via Pillow."""
    label = "<bytes>" if isinstance(source, bytes) else str(source)
    try:
        fp = io.BytesIO(source) if isinstance(source, bytes) else Path(source)
        with Image.open(fp) as image:
            image.load()
            rgba = np.array(image.convert("RGBA"), dtype=np.uint8)
    except (OSError, UnidentifiedImageError, ValueError) as exc:
        raise PrerequisiteError(f"failed to load image {label}: {exc}") from exc
    height, width, _ = rgba.shape
    LOGGER.debug("Decoded image %s (%dx%d)", label, width, height)
    return DecodedImage(rgba=rgba, width=width, height=height)


async def load_image(source: ImageSource) -> DecodedImage:
    return await asyncio.to_thread(decode_image, source)
