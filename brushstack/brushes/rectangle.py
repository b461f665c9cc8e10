from __future__ import annotations

from typing import Any

from brushstack.errors import ConfigurationError
from brushstack.geometry import Rect

from .base import BaseBrush, coerce_color, coerce_number, coerce_opacity, coerce_size


class Rectangle(BaseBrush):
    required_options = ("x", "y", "width", "height")
    optional_options = ("fill", "stroke", "stroke_width", "opacity")

    def _configure(self, options: dict[str, Any]) -> None:
        self.x = coerce_number(options, "x")
        self.y = coerce_number(options, "y")
        self.width = coerce_size(options, "width")
        self.height = coerce_size(options, "height")
        opacity = coerce_opacity(options)
        self.fill = coerce_color(options, "fill", "#000000", opacity)
        self.stroke = coerce_color(options, "stroke", None, opacity)
        self.stroke_width = coerce_number(options, "stroke_width", 0)
        if self.stroke_width < 0:
            raise ConfigurationError(f"option `stroke_width` must be >= 0, got {self.stroke_width}")

    def _draw(self) -> Rect:
        x0 = int(round(self.x))
        y0 = int(round(self.y))
        w = int(round(self.width))
        h = int(round(self.height))
        if self.fill is not None:
            self.surface.fill_rect(x0, y0, w, h, self.fill)
        if self.stroke is not None and self.stroke_width > 0:
            # Stroke sits inside the box.
            sw = min(max(1, int(round(self.stroke_width))), max(1, min(w, h)))
            self.surface.fill_rect(x0, y0, w, sw, self.stroke)
            self.surface.fill_rect(x0, y0 + h - sw, w, sw, self.stroke)
            self.surface.fill_rect(x0, y0 + sw, sw, h - 2 * sw, self.stroke)
            self.surface.fill_rect(x0 + w - sw, y0 + sw, sw, h - 2 * sw, self.stroke)
        return Rect.from_xywh(self.x, self.y, self.width, self.height)
