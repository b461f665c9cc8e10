from brushstack.api import new_layer
from brushstack.brushes import BaseBrush, Brush, ImageBrush, LinearGradient, Printer, RadialGradient, Rectangle
from brushstack.config import LayerConfig, OutputPathAllocator, UniquePathAllocator, load_layer_config
from brushstack.errors import (
    ConfigurationError,
    LayerError,
    LayerStateError,
    LayerTimeoutError,
    PersistenceError,
    PrerequisiteError,
)
from brushstack.geometry import BoundingBox, Rect, placement_rect
from brushstack.jobs import JobQueue
from brushstack.layer import Layer, LayerResult, RenderState
from brushstack.persistence import PersistenceSink, PngFileSink
from brushstack.raster import Surface

__all__ = [
    "BaseBrush",
    "BoundingBox",
    "Brush",
    "ConfigurationError",
    "ImageBrush",
    "JobQueue",
    "Layer",
    "LayerConfig",
    "LayerError",
    "LayerResult",
    "LayerStateError",
    "LayerTimeoutError",
    "LinearGradient",
    "OutputPathAllocator",
    "PersistenceError",
    "PersistenceSink",
    "PngFileSink",
    "PrerequisiteError",
    "Printer",
    "RadialGradient",
    "Rect",
    "Rectangle",
    "RenderState",
    "Surface",
    "UniquePathAllocator",
    "load_layer_config",
    "new_layer",
    "placement_rect",
]
