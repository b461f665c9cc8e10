from .color import RGBA, apply_opacity, parse_color
from .decode import DecodedImage, ImageSource, decode_image, load_image
from .resize import resize_rgba_bilinear
from .surface import Surface
from .text import DEFAULT_FONT_FAMILY, DEFAULT_FONT_SIZE_PX, load_font, text_mask

__all__ = [
    "DEFAULT_FONT_FAMILY",
    "DEFAULT_FONT_SIZE_PX",
    "DecodedImage",
    "ImageSource",
    "RGBA",
    "Surface",
    "apply_opacity",
    "decode_image",
    "load_font",
    "load_image",
    "parse_color",
    "resize_rgba_bilinear",
    "text_mask",
]
