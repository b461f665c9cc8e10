from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in surface pixels, edges inclusive of `top`/`left`."""

    top: float
    right: float
    bottom: float
    left: float

    @classmethod
    def from_xywh(cls, x: float, y: float, width: float, height: float) -> "Rect":
        return cls(top=y, right=x + width, bottom=y + height, left=x)

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    def union(self, other: "Rect") -> "Rect":
        return Rect(
            top=min(self.top, other.top),
            right=max(self.right, other.right),
            bottom=max(self.bottom, other.bottom),
            left=min(self.left, other.left),
        )

    def as_dict(self) -> dict[str, float]:
        return {"top": self.top, "right": self.right, "bottom": self.bottom, "left": self.left}


class BoundingBox:
    """Accumulates the union of every rectangle drawn on a layer.

    The empty box has no edges at all (`rect is None`). A zero coordinate is an
    ordinary value and never means "unset".
    """

    def __init__(self, rect: Rect | None = None) -> None:
        self._rect = rect

    @property
    def rect(self) -> Rect | None:
        return self._rect

    @property
    def is_empty(self) -> bool:
        return self._rect is None

    def merge(self, rect: Rect | None) -> None:
        if rect is None:
            return
        if self._rect is None:
            self._rect = rect
            return
        self._rect = self._rect.union(rect)

    def as_dict(self) -> dict[str, float | None]:
        if self._rect is None:
            return {"top": None, "right": None, "bottom": None, "left": None}
        return self._rect.as_dict()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundingBox):
            return NotImplemented
        return self._rect == other._rect

    def __repr__(self) -> str:
        return f"BoundingBox({self._rect!r})"


def placement_rect(
    x: float,
    y: float,
    natural_width: float,
    natural_height: float,
    width: float | None = None,
    height: float | None = None,
) -> Rect:
    # A lone width yields a square; the image aspect ratio is not preserved.
    if width and not height:
        return Rect.from_xywh(x, y, width, width)
    if width and height:
        return Rect.from_xywh(x, y, width, height)
    return Rect.from_xywh(x, y, natural_width, natural_height)
