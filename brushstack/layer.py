from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
import inspect
import logging
from pathlib import Path
from typing import Any, Awaitable, Mapping

from .brushes import Brush, ImageBrush, LinearGradient, Printer, RadialGradient, Rectangle
from .brushes.base import coerce_number, coerce_optional_size
from .config import LayerConfig, OutputPathAllocator, UniquePathAllocator, default_output_dir
from .errors import ConfigurationError, LayerError, LayerStateError, LayerTimeoutError
from .geometry import BoundingBox, Rect, placement_rect
from .jobs import JobQueue
from .persistence import PersistenceSink, PngFileSink
from .raster.decode import ImageSource, load_image
from .raster.surface import Surface


LOGGER = logging.getLogger(__name__)

BrushItem = Brush | Awaitable[Brush]


class RenderState(Enum):
    UNRENDERED = "unrendered"
    RENDERING = "rendering"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class LayerResult:
    name: str
    bounds: Rect | None
    path: Path

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "bounds": None if self.bounds is None else self.bounds.as_dict(),
            "path": str(self.path),
        }


class Layer:
    """Composes brushes onto one surface, tracks their bounds and writes a PNG.

    Lifecycle: add brushes / place images / create image brushes, then
    `await render()` exactly once. `render()` waits for every job, draws the
    brushes in insertion order, marks the layer done and persists it.
    """

    def __init__(
        self,
        name: str,
        surface: Surface,
        *,
        output_path: str | Path | None = None,
        allocator: OutputPathAllocator | None = None,
        sink: PersistenceSink | None = None,
        job_timeout_s: float | None = None,
        save_timeout_s: float | None = None,
    ) -> None:
        self.name = name
        self.surface = surface
        self.jobs = JobQueue()
        self.bounds = BoundingBox()
        self.job_timeout_s = job_timeout_s
        self.save_timeout_s = save_timeout_s
        if output_path is None:
            output_path = (allocator or UniquePathAllocator(default_output_dir())).allocate(name)
        self._output_path = Path(output_path)
        self._sink: PersistenceSink = sink or PngFileSink()
        self._state = RenderState.UNRENDERED
        self._brushes: list[BrushItem] = []
        self._drawn = asyncio.Event()
        self._last_placement: asyncio.Future[Layer] | None = None
        self._persist_task: asyncio.Future[Path] | None = None

    @classmethod
    def from_config(
        cls,
        name: str,
        config: LayerConfig,
        *,
        allocator: OutputPathAllocator | None = None,
        sink: PersistenceSink | None = None,
    ) -> "Layer":
        return cls(
            name,
            Surface(config.width, config.height, background=config.background),
            allocator=allocator or UniquePathAllocator(config.output_dir),
            sink=sink,
            job_timeout_s=config.job_timeout_s,
            save_timeout_s=config.save_timeout_s,
        )

    @property
    def state(self) -> RenderState:
        return self._state

    @property
    def output_path(self) -> Path:
        return self._output_path

    @property
    def brushes(self) -> tuple[BrushItem, ...]:
        return tuple(self._brushes)

    def add(self, brush: BrushItem) -> "Layer":
        self._require_unrendered("add a brush")
        self._brushes.append(brush)
        return self

    def place_image_at(
        self,
        source: ImageSource,
        x: float,
        y: float,
        width: float | None = None,
        height: float | None = None,
    ) -> asyncio.Future["Layer"]:
        """Load `source` and draw it straight onto the surface once loaded.

        Placed images are jobs, not brushes: they land before the brush pass,
        in call order. Await the returned task to observe load failures early.
        """
        self._require_unrendered("place an image")
        placement = {"x": x, "y": y, "width": width, "height": height}
        x = coerce_number(placement, "x")
        y = coerce_number(placement, "y")
        width = coerce_optional_size(placement, "width")
        height = coerce_optional_size(placement, "height")
        task = self.jobs.submit(self._place_image(source, x, y, width, height, self._last_placement))
        self._last_placement = task
        return task

    def create_rect(self, options: Mapping[str, Any] | None = None, **kwargs: Any) -> Rectangle:
        return Rectangle(self._bind(options, kwargs))

    def create_gradient(self, options: Mapping[str, Any] | None = None, **kwargs: Any) -> LinearGradient | RadialGradient:
        opts = self._bind(options, kwargs)
        kind = opts.pop("type", None)
        if not kind:
            return LinearGradient(opts)
        if not isinstance(kind, str):
            raise ConfigurationError(f"gradient type must be a string, got {type(kind).__name__}")
        if kind.lower() == "radial":
            return RadialGradient(opts)
        raise ConfigurationError(f"invalid gradient type supplied: {kind!r}")

    def create_image(self, options: Mapping[str, Any] | None = None, **kwargs: Any) -> ImageBrush:
        self._require_unrendered("create an image brush")
        brush = ImageBrush(self._bind(options, kwargs))
        self.jobs.submit(brush.load_image())
        return brush

    def create_printer(self, options: Mapping[str, Any] | None = None, **kwargs: Any) -> Printer:
        return Printer(self._bind(options, kwargs))

    async def render(self) -> LayerResult:
        if self._state is not RenderState.UNRENDERED:
            raise LayerStateError(f"layer {self.name!r} was already rendered (state={self._state.value})")
        self._state = RenderState.RENDERING
        LOGGER.info("Rendering layer %r: brushes=%d jobs=%d", self.name, len(self._brushes), len(self.jobs))
        try:
            await self.jobs.join(timeout=self.job_timeout_s)
            for item in self._brushes:
                brush = await item if inspect.isawaitable(item) else item
                await brush.render()
                self.bounds.merge(brush.bounds)
                LOGGER.debug("Layer %r drew %s; bounds=%s", self.name, type(brush).__name__, self.bounds.rect)
        except BaseException as exc:
            self._state = RenderState.FAILED
            self._drawn.set()
            LOGGER.warning("Rendering layer %r failed: %r", self.name, exc)
            raise
        self._state = RenderState.DONE
        self._drawn.set()
        path = await self.save()
        LOGGER.info("Rendered layer %r; bounds=%s", self.name, self.bounds.as_dict())
        return LayerResult(name=self.name, bounds=self.bounds.rect, path=path)

    async def save(self) -> Path:
        """Write the surface once drawing is done; every caller shares one write."""
        if self._state is RenderState.UNRENDERED:
            raise LayerStateError("render must be called first")
        if self._persist_task is None:
            self._persist_task = asyncio.ensure_future(self._persist())
        return await asyncio.shield(self._persist_task)

    async def _persist(self) -> Path:
        try:
            async with asyncio.timeout(self.save_timeout_s):
                await self._drawn.wait()
                if self._state is not RenderState.DONE:
                    raise LayerStateError(f"layer {self.name!r} failed to render and cannot be saved")
                await self._sink.write(self.surface, self._output_path)
        except TimeoutError as exc:
            if isinstance(exc, LayerError):
                raise
            LOGGER.warning("Saving layer %r timed out after %.3fs", self.name, self.save_timeout_s)
            raise LayerTimeoutError(f"layer {self.name!r} was not saved within {self.save_timeout_s}s") from exc
        return self._output_path

    async def _place_image(
        self,
        source: ImageSource,
        x: float,
        y: float,
        width: float | None,
        height: float | None,
        previous: asyncio.Future["Layer"] | None,
    ) -> "Layer":
        image = await load_image(source)
        if previous is not None:
            await asyncio.wait({previous})
        rect = placement_rect(x, y, image.width, image.height, width, height)
        self.surface.draw_image(
            image.rgba,
            int(round(rect.left)),
            int(round(rect.top)),
            int(round(rect.width)),
            int(round(rect.height)),
        )
        self.bounds.merge(rect)
        LOGGER.debug("Layer %r placed image at %s", self.name, rect)
        return self

    def _bind(self, options: Mapping[str, Any] | None, overrides: Mapping[str, Any]) -> dict[str, Any]:
        opts = dict(options or {})
        opts.update(overrides)
        opts["surface"] = self.surface
        return opts

    def _require_unrendered(self, action: str) -> None:
        if self._state is not RenderState.UNRENDERED:
            raise LayerStateError(f"cannot {action} on layer {self.name!r} once rendering started")
