from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol

import numpy as np
from PIL import Image

from .errors import PersistenceError
from .raster.surface import Surface


LOGGER = logging.getLogger(__name__)


class PersistenceSink(Protocol):
    async def write(self, surface: Surface, path: Path) -> None:
        ...


class PngFileSink:
    """Stream-encodes a surface snapshot as PNG into a file, off the event loop."""

    def __init__(self, *, compress_level: int = 6) -> None:
        self.compress_level = compress_level

    async def write(self, surface: Surface, path: Path) -> None:
        pixels = surface.to_numpy()
        size = await asyncio.to_thread(self._encode_to_file, pixels, Path(path))
        LOGGER.info("Wrote %s (%d bytes)", path, size)

    def _encode_to_file(self, pixels: np.ndarray, path: Path) -> int:
        image = Image.fromarray(pixels)
        try:
            f = path.open("wb")
        except OSError as exc:
            LOGGER.warning("Failed to open %s: %s", path, exc)
            raise PersistenceError(f"failed to open {path}: {exc}") from exc
        try:
            with f:
                image.save(f, format="PNG", compress_level=self.compress_level)
                f.flush()
                return f.tell()
        except (OSError, ValueError) as exc:
            path.unlink(missing_ok=True)
            LOGGER.warning("Failed to write %s: %s", path, exc)
            raise PersistenceError(f"failed to write {path}: {exc}") from exc
