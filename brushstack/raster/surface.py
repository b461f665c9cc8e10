from __future__ import annotations

import logging

import numpy as np
import torch

from brushstack.errors import ConfigurationError

from .color import RGBA
from .resize import resize_rgba_bilinear


LOGGER = logging.getLogger(__name__)


class Surface:
    """RGBA255 drawing surface; every draw is a clipped source-over composite."""

    def __init__(self, width: int, height: int, background: RGBA = (0, 0, 0, 0)) -> None:
        if width <= 0 or height <= 0:
            raise ConfigurationError("surface width and height must be > 0")
        self.width = int(width)
        self.height = int(height)
        self.background = background
        bg = torch.tensor(background, dtype=torch.uint8).view(1, 1, 4)
        self._pixels = bg.expand(self.height, self.width, 4).clone()
        self._grid_x = torch.arange(self.width, dtype=torch.float32).unsqueeze(0).expand(self.height, self.width)
        self._grid_y = torch.arange(self.height, dtype=torch.float32).unsqueeze(1).expand(self.height, self.width)
        self._revision = 0

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def grid(self) -> tuple[torch.Tensor, torch.Tensor]:
        """Pixel-centre x/y coordinate grids, shape (H, W)."""
        return self._grid_x + 0.5, self._grid_y + 0.5

    def snapshot(self) -> torch.Tensor:
        return self._pixels.clone()

    def to_numpy(self) -> np.ndarray:
        return self._pixels.cpu().numpy().copy()

    def fill_rect(self, x: int, y: int, w: int, h: int, color: RGBA) -> None:
        if w <= 0 or h <= 0 or color[3] <= 0:
            return
        patch = torch.tensor(color, dtype=torch.float32).view(1, 1, 4).expand(h, w, 4)
        self.composite(patch, x, y)

    def blend_mask(self, mask: np.ndarray, x: int, y: int, color: RGBA) -> None:
        h, w = mask.shape
        if h <= 0 or w <= 0:
            return
        cov = torch.from_numpy(mask.astype(np.float32) / 255.0)
        patch = torch.empty((h, w, 4), dtype=torch.float32)
        patch[:, :, :3] = torch.tensor(color[:3], dtype=torch.float32).view(1, 1, 3)
        patch[:, :, 3] = cov * float(color[3])
        self.composite(patch, x, y)

    def draw_image(self, rgba: np.ndarray | torch.Tensor, x: int, y: int, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            return
        src = torch.from_numpy(np.ascontiguousarray(rgba)) if isinstance(rgba, np.ndarray) else rgba
        if src.dim() != 3 or src.shape[2] != 4:
            raise ValueError(f"image must have shape (H, W, 4), got {tuple(src.shape)}")
        scaled = resize_rgba_bilinear(src, target_h=height, target_w=width)
        self.composite(scaled.to(torch.float32), x, y)

    def composite(self, patch: torch.Tensor, x: int, y: int) -> None:
        """Blend a straight-alpha float RGBA patch (0..255 per channel) at (x, y)."""
        h, w = int(patch.shape[0]), int(patch.shape[1])
        x0 = max(0, x)
        y0 = max(0, y)
        x1 = min(self.width, x + w)
        y1 = min(self.height, y + h)
        if x1 <= x0 or y1 <= y0:
            return
        sx0 = x0 - x
        sy0 = y0 - y
        src = patch[sy0 : sy0 + (y1 - y0), sx0 : sx0 + (x1 - x0)]
        src_alpha = src[:, :, 3] / 255.0
        if not bool((src_alpha > 0).any()):
            return

        view = self._pixels[y0:y1, x0:x1]
        dst_rgb = view[:, :, :3].to(torch.float32)
        dst_alpha = view[:, :, 3].to(torch.float32) / 255.0

        out_alpha = src_alpha + dst_alpha * (1.0 - src_alpha)
        out_rgb_num = src[:, :, :3] * src_alpha.unsqueeze(-1) + dst_rgb * (dst_alpha * (1.0 - src_alpha)).unsqueeze(-1)
        safe = torch.where(out_alpha > 1e-6, out_alpha, torch.ones_like(out_alpha))
        out_rgb = out_rgb_num / safe.unsqueeze(-1)

        view[:, :, :3] = torch.clamp(torch.round(out_rgb), 0, 255).to(torch.uint8)
        view[:, :, 3] = torch.clamp(torch.round(out_alpha * 255.0), 0, 255).to(torch.uint8)
        self._revision += 1
        LOGGER.debug("Surface composite at (%d, %d) size %dx%d; revision=%d", x0, y0, x1 - x0, y1 - y0, self._revision)
