from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont


DEFAULT_FONT_FAMILY = "DejaVu Sans"
DEFAULT_FONT_SIZE_PX = 16.0
FONT_FALLBACK_PATTERNS = (
    "dejavusans",
    "helvetica",
    "arial",
    "liberationsans",
    "menlo",
    "courier",
)
FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/System/Library/Fonts/Supplemental"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


def text_mask(
    text: str,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
    line_spacing_px: float = 0.0,
) -> np.ndarray:
    """Coverage mask (uint8, H x W) of a text block whose top-left ink pixel sits at (0, 0)."""
    font = load_font(font_family, font_size_px)
    return _render_mask(text, font, int(round(line_spacing_px)))


@lru_cache(maxsize=64)
def load_font(font_family: str, font_size_px: float) -> Font:
    size = max(1, int(round(font_size_px)))
    font_path = resolve_font_path(font_family)
    if font_path is None:
        return ImageFont.load_default(size=size)
    try:
        return ImageFont.truetype(str(font_path), size=size)
    except OSError:
        return ImageFont.load_default(size=size)


@lru_cache(maxsize=32)
def resolve_font_path(font_family: str) -> Path | None:
    wanted = (font_family.strip() or DEFAULT_FONT_FAMILY).lower().replace(" ", "")
    candidates: list[Path] = []
    for base in FONT_DIRS:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc"):
            candidates.extend(sorted(base.rglob(ext)))

    for pattern in (wanted,) + FONT_FALLBACK_PATTERNS:
        for path in candidates:
            stem = path.stem.lower().replace(" ", "")
            if stem == pattern:
                return path
        for path in candidates:
            name = path.name.lower().replace(" ", "")
            if pattern in name:
                return path
    return None


def _block_bbox(text: str, font: Font, spacing: int) -> tuple[int, int, int, int]:
    probe = ImageDraw.Draw(Image.new("L", (1, 1), 0))
    return probe.multiline_textbbox((0, 0), text, font=font, spacing=spacing)


@lru_cache(maxsize=128)
def _render_mask(text: str, font: Font, spacing: int) -> np.ndarray:
    if not text:
        return np.zeros((1, 1), dtype=np.uint8)
    left, top, right, bottom = _block_bbox(text, font, spacing)
    width = max(1, int(right - left))
    height = max(1, int(bottom - top))
    image = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(image)
    draw.multiline_text((-left, -top), text, fill=255, font=font, spacing=spacing)
    return np.asarray(image, dtype=np.uint8)
