from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import Any, Mapping, Protocol, runtime_checkable

from brushstack.errors import ConfigurationError, LayerStateError
from brushstack.geometry import Rect
from brushstack.raster.color import RGBA, parse_color
from brushstack.raster.surface import Surface


LOGGER = logging.getLogger(__name__)


@runtime_checkable
class Brush(Protocol):
    """Anything a Layer can render: draws itself, then reports the area it touched."""

    async def render(self) -> None:
        ...

    @property
    def bounds(self) -> Rect | None:
        ...


class BaseBrush(ABC):
    """Options-driven brush bound to a shared surface.

    Subclasses list the option keys they accept in `required_options` and
    `optional_options`, read them in `_configure`, and draw in `_draw`, which
    returns the affected rectangle.
    """

    required_options: tuple[str, ...] = ()
    optional_options: tuple[str, ...] = ()

    def __init__(self, options: Mapping[str, Any]) -> None:
        opts = dict(options)
        surface = opts.pop("surface", None)
        if not isinstance(surface, Surface):
            raise ConfigurationError(f"{type(self).__name__} options must include the shared surface")
        unknown = sorted(set(opts) - set(self.required_options) - set(self.optional_options))
        if unknown:
            raise ConfigurationError(f"{type(self).__name__} got unknown options: {', '.join(unknown)}")
        missing = [key for key in self.required_options if key not in opts]
        if missing:
            raise ConfigurationError(f"{type(self).__name__} missing required options: {', '.join(missing)}")
        self.surface = surface
        self._bounds: Rect | None = None
        self._rendered = False
        self._configure(opts)

    @property
    def rendered(self) -> bool:
        return self._rendered

    @property
    def bounds(self) -> Rect | None:
        if not self._rendered:
            raise LayerStateError(f"{type(self).__name__} bounds are only known after render")
        return self._bounds

    async def render(self) -> None:
        self._bounds = self._draw()
        self._rendered = True
        LOGGER.debug("%s rendered; bounds=%s", type(self).__name__, self._bounds)

    @abstractmethod
    def _configure(self, options: dict[str, Any]) -> None:
        ...

    @abstractmethod
    def _draw(self) -> Rect | None:
        ...


def coerce_number(options: Mapping[str, Any], key: str, default: float | None = None) -> float:
    value = options.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"option `{key}` must be a number, got {value!r}")
    return float(value)


def coerce_optional_number(options: Mapping[str, Any], key: str) -> float | None:
    if options.get(key) is None:
        return None
    return coerce_number(options, key)


def coerce_size(options: Mapping[str, Any], key: str) -> float:
    value = coerce_number(options, key)
    if value < 0:
        raise ConfigurationError(f"option `{key}` must be >= 0, got {value}")
    return value


def coerce_optional_size(options: Mapping[str, Any], key: str) -> float | None:
    if options.get(key) is None:
        return None
    return coerce_size(options, key)


def coerce_point(options: Mapping[str, Any], key: str, default: tuple[float, float]) -> tuple[float, float]:
    value = options.get(key)
    if value is None:
        return default
    try:
        px, py = value
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"option `{key}` must be an (x, y) pair, got {value!r}") from exc
    return (coerce_number({key: px}, key), coerce_number({key: py}, key))


def coerce_opacity(options: Mapping[str, Any]) -> float:
    opacity = coerce_number(options, "opacity", 1.0)
    if opacity < 0.0 or opacity > 1.0:
        raise ConfigurationError(f"option `opacity` must be within 0..1, got {opacity}")
    return opacity


def coerce_color(options: Mapping[str, Any], key: str, default: str | None, opacity: float) -> RGBA | None:
    value = options.get(key, default)
    if value is None:
        return None
    return parse_color(value, opacity)
