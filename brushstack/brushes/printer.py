from __future__ import annotations

from typing import Any

from brushstack.errors import ConfigurationError
from brushstack.geometry import Rect
from brushstack.raster.text import DEFAULT_FONT_FAMILY, DEFAULT_FONT_SIZE_PX, text_mask

from .base import BaseBrush, coerce_color, coerce_number, coerce_opacity


class Printer(BaseBrush):
    """Prints a block of text with its top-left corner at (x, y)."""

    required_options = ("text", "x", "y")
    optional_options = ("font_family", "font_size", "color", "line_spacing", "opacity")

    def _configure(self, options: dict[str, Any]) -> None:
        text = options["text"]
        if not isinstance(text, str):
            raise ConfigurationError(f"option `text` must be a string, got {type(text).__name__}")
        self.text = text
        self.x = coerce_number(options, "x")
        self.y = coerce_number(options, "y")
        family = options.get("font_family", DEFAULT_FONT_FAMILY)
        if not isinstance(family, str):
            raise ConfigurationError("option `font_family` must be a string")
        self.font_family = family
        self.font_size = coerce_number(options, "font_size", DEFAULT_FONT_SIZE_PX)
        if self.font_size <= 0:
            raise ConfigurationError(f"option `font_size` must be > 0, got {self.font_size}")
        self.line_spacing = coerce_number(options, "line_spacing", 0)
        opacity = coerce_opacity(options)
        self.color = coerce_color(options, "color", "#000000", opacity)
        if self.color is None:
            raise ConfigurationError("option `color` must not be None")

    def _draw(self) -> Rect | None:
        if not self.text:
            return None
        mask = text_mask(
            self.text,
            font_family=self.font_family,
            font_size_px=self.font_size,
            line_spacing_px=self.line_spacing,
        )
        self.surface.blend_mask(mask, int(round(self.x)), int(round(self.y)), self.color)
        height, width = mask.shape
        return Rect.from_xywh(self.x, self.y, width, height)
