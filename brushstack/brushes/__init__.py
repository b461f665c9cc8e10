from .base import BaseBrush, Brush
from .gradient import LinearGradient, RadialGradient
from .image import ImageBrush
from .printer import Printer
from .rectangle import Rectangle

__all__ = [
    "BaseBrush",
    "Brush",
    "ImageBrush",
    "LinearGradient",
    "Printer",
    "RadialGradient",
    "Rectangle",
]
