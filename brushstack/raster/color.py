from __future__ import annotations

from typing import Sequence

from brushstack.errors import ConfigurationError


RGBA = tuple[int, int, int, int]
ColorLike = str | Sequence[int]


def parse_color(value: ColorLike, opacity: float = 1.0) -> RGBA:
    if isinstance(value, str):
        r, g, b, a = _parse_hex(value)
    else:
        channels = [int(c) for c in value]
        if len(channels) == 3:
            channels.append(255)
        if len(channels) != 4:
            raise ConfigurationError(f"color tuple must have 3 or 4 channels, got {len(channels)}")
        if any(c < 0 or c > 255 for c in channels):
            raise ConfigurationError(f"color channels must be within 0..255, got {tuple(channels)}")
        r, g, b, a = channels
    return apply_opacity((r, g, b, a), opacity)


def apply_opacity(color: RGBA, opacity: float) -> RGBA:
    r, g, b, a = color
    alpha = int(max(0.0, min(1.0, (a / 255.0) * opacity)) * 255.0)
    return (r, g, b, alpha)


def _parse_hex(hex_color: str) -> RGBA:
    value = hex_color.strip()
    if not value.startswith("#"):
        raise ConfigurationError(f"color must be #RRGGBB or #RRGGBBAA, got `{hex_color}`")
    raw = value[1:]
    if len(raw) not in (6, 8):
        raise ConfigurationError(f"color must be #RRGGBB or #RRGGBBAA, got `{hex_color}`")
    try:
        r = int(raw[0:2], 16)
        g = int(raw[2:4], 16)
        b = int(raw[4:6], 16)
        a = int(raw[6:8], 16) if len(raw) == 8 else 255
    except ValueError as exc:
        raise ConfigurationError(f"color must be #RRGGBB or #RRGGBBAA, got `{hex_color}`") from exc
    return (r, g, b, a)
