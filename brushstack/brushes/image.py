from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np

from brushstack.errors import ConfigurationError, PrerequisiteError
from brushstack.geometry import Rect, placement_rect
from brushstack.raster.decode import DecodedImage, ImageSource, load_image

from .base import BaseBrush, coerce_number, coerce_opacity, coerce_optional_size


LOGGER = logging.getLogger(__name__)


class ImageBrush(BaseBrush):
    """Draws an external image; `load_image()` must finish before `render()`."""

    required_options = ("source",)
    optional_options = ("x", "y", "width", "height", "opacity")

    def _configure(self, options: dict[str, Any]) -> None:
        source = options["source"]
        if not isinstance(source, (str, Path, bytes)):
            raise ConfigurationError(f"option `source` must be a path or bytes, got {type(source).__name__}")
        self.source: ImageSource = source
        self.x = coerce_number(options, "x", 0)
        self.y = coerce_number(options, "y", 0)
        self.width = coerce_optional_size(options, "width")
        self.height = coerce_optional_size(options, "height")
        self.opacity = coerce_opacity(options)
        self._image: DecodedImage | None = None

    async def load_image(self) -> "ImageBrush":
        self._image = await load_image(self.source)
        LOGGER.debug("Image brush loaded %dx%d source", self._image.width, self._image.height)
        return self

    def _draw(self) -> Rect:
        if self._image is None:
            raise PrerequisiteError(f"image {self.source!r} was not loaded before render")
        image = self._image
        rect = placement_rect(self.x, self.y, image.width, image.height, self.width, self.height)
        rgba = image.rgba
        if self.opacity < 1.0:
            rgba = rgba.copy()
            rgba[:, :, 3] = np.round(rgba[:, :, 3].astype(np.float32) * self.opacity).astype(np.uint8)
        self.surface.draw_image(
            rgba,
            int(round(rect.left)),
            int(round(rect.top)),
            int(round(rect.width)),
            int(round(rect.height)),
        )
        return rect
