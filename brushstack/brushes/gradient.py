from __future__ import annotations

from abc import abstractmethod
import math
from typing import Any, Sequence

import torch

from brushstack.errors import ConfigurationError
from brushstack.geometry import Rect
from brushstack.raster.color import parse_color

from .base import (
    BaseBrush,
    coerce_number,
    coerce_opacity,
    coerce_optional_number,
    coerce_point,
    coerce_size,
)


GRADIENT_OPTIONS = ("x", "y", "width", "height", "stops")


class _GradientBrush(BaseBrush):
    """Fills its rect with colors interpolated between `stops` along `_parameter`."""

    required_options = GRADIENT_OPTIONS

    def _configure(self, options: dict[str, Any]) -> None:
        self.x = coerce_number(options, "x")
        self.y = coerce_number(options, "y")
        self.width = coerce_size(options, "width")
        self.height = coerce_size(options, "height")
        opacity = coerce_opacity(options)
        self.stops = _coerce_stops(options["stops"], opacity)
        self._offsets = torch.tensor([offset for offset, _ in self.stops], dtype=torch.float32)
        self._colors = torch.tensor([color for _, color in self.stops], dtype=torch.float32)
        self._configure_shape(options)

    def _configure_shape(self, options: dict[str, Any]) -> None:
        ...

    @abstractmethod
    def _parameter(self, gx: torch.Tensor, gy: torch.Tensor) -> torch.Tensor:
        ...

    def _draw(self) -> Rect:
        rect = Rect.from_xywh(self.x, self.y, self.width, self.height)
        surface = self.surface
        x0 = max(0, int(round(self.x)))
        y0 = max(0, int(round(self.y)))
        x1 = min(surface.width, int(round(self.x + self.width)))
        y1 = min(surface.height, int(round(self.y + self.height)))
        if x1 <= x0 or y1 <= y0:
            return rect
        grid_x, grid_y = surface.grid
        t = self._parameter(grid_x[y0:y1, x0:x1], grid_y[y0:y1, x0:x1]).clamp(0.0, 1.0)
        surface.composite(_interpolate_stops(self._offsets, self._colors, t), x0, y0)
        return rect


class LinearGradient(_GradientBrush):
    optional_options = ("start", "end", "opacity")

    def _configure_shape(self, options: dict[str, Any]) -> None:
        mid_y = self.y + self.height / 2.0
        self.start = coerce_point(options, "start", (self.x, mid_y))
        self.end = coerce_point(options, "end", (self.x + self.width, mid_y))

    def _parameter(self, gx: torch.Tensor, gy: torch.Tensor) -> torch.Tensor:
        sx, sy = self.start
        dx = self.end[0] - sx
        dy = self.end[1] - sy
        length_sq = dx * dx + dy * dy
        if length_sq <= 0:
            return torch.zeros_like(gx)
        return ((gx - sx) * dx + (gy - sy) * dy) / length_sq


class RadialGradient(_GradientBrush):
    optional_options = ("center", "radius", "inner_radius", "opacity")

    def _configure_shape(self, options: dict[str, Any]) -> None:
        self.center = coerce_point(options, "center", (self.x + self.width / 2.0, self.y + self.height / 2.0))
        radius = coerce_optional_number(options, "radius")
        self.radius = math.hypot(self.width, self.height) / 2.0 if radius is None else radius
        self.inner_radius = coerce_number(options, "inner_radius", 0.0)
        if self.inner_radius < 0:
            raise ConfigurationError(f"option `inner_radius` must be >= 0, got {self.inner_radius}")
        if self.radius <= self.inner_radius:
            raise ConfigurationError("option `radius` must be greater than `inner_radius`")

    def _parameter(self, gx: torch.Tensor, gy: torch.Tensor) -> torch.Tensor:
        cx, cy = self.center
        dist = torch.sqrt((gx - cx) ** 2 + (gy - cy) ** 2)
        return (dist - self.inner_radius) / (self.radius - self.inner_radius)


def _coerce_stops(value: Any, opacity: float) -> list[tuple[float, tuple[int, int, int, int]]]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or not value:
        raise ConfigurationError("option `stops` must be a non-empty sequence of (offset, color) pairs")
    stops: list[tuple[float, tuple[int, int, int, int]]] = []
    for item in value:
        try:
            offset, color = item
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"gradient stop must be an (offset, color) pair, got {item!r}") from exc
        if isinstance(offset, bool) or not isinstance(offset, (int, float)) or not 0.0 <= offset <= 1.0:
            raise ConfigurationError(f"gradient stop offset must be within 0..1, got {offset!r}")
        stops.append((float(offset), parse_color(color, opacity)))
    stops.sort(key=lambda stop: stop[0])
    return stops


def _interpolate_stops(offsets: torch.Tensor, colors: torch.Tensor, t: torch.Tensor) -> torch.Tensor:
    if offsets.numel() == 1:
        return colors[0].view(1, 1, 4).expand(*t.shape, 4)
    n = offsets.numel()
    hi = torch.searchsorted(offsets, t.contiguous(), right=True).clamp(1, n - 1)
    lo = hi - 1
    span = offsets[hi] - offsets[lo]
    frac = torch.where(span > 0, (t - offsets[lo]) / torch.where(span > 0, span, torch.ones_like(span)), torch.ones_like(t))
    frac = frac.clamp(0.0, 1.0).unsqueeze(-1)
    return colors[lo] * (1.0 - frac) + colors[hi] * frac
