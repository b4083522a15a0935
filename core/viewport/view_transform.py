"""
Stored <-> rendered <-> viewport coordinate transforms for the floor-plan canvas.

Stored space:   native pixels of the uploaded floor-plan image
Rendered space: stored * fit.scale + fit.offset  (contain-fit, centered)
Viewport space: rendered * zoom + pan            (zoom about canvas origin)
"""

import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

import numpy as np

from config import VIEWPORT
from core.viewport.fit_scale import FitResult

Point = Tuple[float, float]


def clamp_zoom(zoom: float) -> float:
    """Clamp a requested zoom to [MIN_ZOOM, MAX_ZOOM]. NaN resolves to 1.0."""
    zoom = float(zoom)
    if math.isnan(zoom):
        return 1.0
    return max(VIEWPORT.MIN_ZOOM, min(zoom, VIEWPORT.MAX_ZOOM))


@dataclass(frozen=True)
class ViewTransform:
    """
    Caller-owned transform state for one canvas.

    Invariants: fit.scale > 0, zoom within [MIN_ZOOM, MAX_ZOOM], so the
    composed transform is always invertible.
    """
    fit: FitResult
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'zoom', clamp_zoom(self.zoom))

    # ------------------------------------------------------------------
    # Scalar mapping
    # ------------------------------------------------------------------

    def forward(self, x: float, y: float) -> Point:
        """Stored -> viewport"""
        rx = x * self.fit.scale + self.fit.offset_x
        ry = y * self.fit.scale + self.fit.offset_y
        return (rx * self.zoom + self.pan_x, ry * self.zoom + self.pan_y)

    def inverse(self, vx: float, vy: float) -> Point:
        """Viewport -> stored (undo pan, undo zoom, undo fit)"""
        rx = (vx - self.pan_x) / self.zoom
        ry = (vy - self.pan_y) / self.zoom
        return ((rx - self.fit.offset_x) / self.fit.scale,
                (ry - self.fit.offset_y) / self.fit.scale)

    # ------------------------------------------------------------------
    # Vectorised mapping
    # ------------------------------------------------------------------

    def matrix(self) -> np.ndarray:
        """3x3 homogeneous stored -> viewport matrix"""
        s = self.fit.scale * self.zoom
        return np.array([
            [s, 0.0, self.fit.offset_x * self.zoom + self.pan_x],
            [0.0, s, self.fit.offset_y * self.zoom + self.pan_y],
            [0.0, 0.0, 1.0]
        ])

    def inverse_matrix(self) -> np.ndarray:
        """3x3 homogeneous viewport -> stored matrix"""
        s = self.fit.scale * self.zoom
        return np.array([
            [1.0 / s, 0.0, -(self.fit.offset_x / self.fit.scale + self.pan_x / s)],
            [0.0, 1.0 / s, -(self.fit.offset_y / self.fit.scale + self.pan_y / s)],
            [0.0, 0.0, 1.0]
        ])

    def forward_points(self, points) -> np.ndarray:
        """Map an (N, 2) array of stored points to viewport space"""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        rendered = pts * self.fit.scale + (self.fit.offset_x, self.fit.offset_y)
        return rendered * self.zoom + (self.pan_x, self.pan_y)

    def inverse_points(self, points) -> np.ndarray:
        """Map an (N, 2) array of viewport points to stored space"""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        rendered = (pts - (self.pan_x, self.pan_y)) / self.zoom
        return (rendered - (self.fit.offset_x, self.fit.offset_y)) / self.fit.scale

    # ------------------------------------------------------------------
    # Derived transforms
    # ------------------------------------------------------------------

    def zoomed(self, zoom: float, anchor: Optional[Point] = None) -> "ViewTransform":
        """
        Zoom so that the content under `anchor` (viewport space) stays put.

        Args:
            zoom: Requested zoom, clamped to [MIN_ZOOM, MAX_ZOOM]
            anchor: Fixed point in viewport space (default: canvas origin)
        """
        new_zoom = clamp_zoom(zoom)
        ax, ay = anchor if anchor is not None else (0.0, 0.0)

        # Rendered-space point currently under the anchor
        rx = (ax - self.pan_x) / self.zoom
        ry = (ay - self.pan_y) / self.zoom

        return replace(self, zoom=new_zoom, pan_x=ax - rx * new_zoom, pan_y=ay - ry * new_zoom)

    def panned_by(self, dx: float, dy: float) -> "ViewTransform":
        return replace(self, pan_x=self.pan_x + dx, pan_y=self.pan_y + dy)

    def with_pan(self, pan_x: float, pan_y: float) -> "ViewTransform":
        return replace(self, pan_x=pan_x, pan_y=pan_y)

    def reset(self) -> "ViewTransform":
        """Zoom 1, no pan"""
        return replace(self, zoom=1.0, pan_x=0.0, pan_y=0.0)

    def refit(self, fit: FitResult) -> "ViewTransform":
        """Canvas resized or image replaced - keep the user's zoom and pan"""
        return replace(self, fit=fit)

    # ------------------------------------------------------------------
    # Geometry helpers
    # ------------------------------------------------------------------

    def contains_stored(self, x: float, y: float) -> bool:
        """Is the stored point inside the floor-plan image?"""
        return 0 <= x <= self.fit.image_width and 0 <= y <= self.fit.image_height

    def image_rect(self) -> Tuple[float, float, float, float]:
        """(x, y, width, height) of the whole image in viewport space"""
        x, y = self.forward(0.0, 0.0)
        s = self.fit.scale * self.zoom
        return (x, y, self.fit.image_width * s, self.fit.image_height * s)

    def to_dict(self) -> dict:
        return {
            'fit': self.fit.to_dict(),
            'zoom': self.zoom,
            'pan_x': self.pan_x,
            'pan_y': self.pan_y
        }


def forward_map(point: Point, transform: ViewTransform) -> Point:
    """Stored-space point -> viewport-space point (marker rendering path)"""
    return transform.forward(point[0], point[1])


def inverse_map(point: Point, transform: ViewTransform) -> Point:
    """Viewport-space point -> stored-space point (marker placement path)"""
    return transform.inverse(point[0], point[1])
