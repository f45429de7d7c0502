from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from blocksight.config import settings

Point = Tuple[float, float]


@dataclass(frozen=True)
class ZoomTransform:
    """Affine map local -> screen: (x, y) -> (x * k + tx, y * k + ty)."""

    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def apply(self, point: Point) -> Point:
        return (point[0] * self.k + self.x, point[1] * self.k + self.y)

    def invert(self, point: Point) -> Point:
        return ((point[0] - self.x) / self.k, (point[1] - self.y) / self.k)

    def to_svg(self) -> str:
        return f"translate({self.x:.3f},{self.y:.3f}) scale({self.k:.4f})"


IDENTITY = ZoomTransform()


class ZoomBehavior:
    """
    Zoom/pan gestures on the whole graph group.

    Scales outside scale_extent are clamped, never rejected.
    """

    def __init__(self, scale_extent: Tuple[float, float] = settings.ZOOM_SCALE_EXTENT) -> None:
        lo, hi = scale_extent
        if lo <= 0 or lo > hi:
            raise ValueError("scale_extent must satisfy 0 < min <= max")
        self.scale_extent = (lo, hi)
        self.transform = IDENTITY

    def constrain_scale(self, k: float) -> float:
        lo, hi = self.scale_extent
        return max(lo, min(hi, k))

    def scale_to(self, k: float, point: Point = (0.0, 0.0)) -> ZoomTransform:
        # keep `point` (screen coordinates) fixed under the new scale
        local = self.transform.invert(point)
        k1 = self.constrain_scale(k)
        self.transform = ZoomTransform(
            k=k1,
            x=point[0] - local[0] * k1,
            y=point[1] - local[1] * k1,
        )
        return self.transform

    def scale_by(self, factor: float, point: Point = (0.0, 0.0)) -> ZoomTransform:
        return self.scale_to(self.transform.k * factor, point)

    def translate_by(self, dx: float, dy: float) -> ZoomTransform:
        t = self.transform
        self.transform = ZoomTransform(k=t.k, x=t.x + dx, y=t.y + dy)
        return self.transform

    def reset(self) -> None:
        self.transform = IDENTITY
