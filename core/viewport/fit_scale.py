"""
Contain-fit of a floor-plan image into a canvas.
Pure functions - no state, no I/O.
"""

import math
from dataclasses import dataclass, asdict
from typing import Tuple

from core.viewport.errors import InvalidImageDimensions, ZeroSizeCanvas


@dataclass(frozen=True)
class FitResult:
    """Uniform scale + centering offset mapping stored space to rendered space."""
    scale: float
    offset_x: float
    offset_y: float
    image_width: float
    image_height: float
    canvas_width: float
    canvas_height: float

    @property
    def rendered_width(self) -> float:
        return self.image_width * self.scale

    @property
    def rendered_height(self) -> float:
        return self.image_height * self.scale

    @property
    def canvas_center(self) -> Tuple[float, float]:
        return (self.canvas_width / 2, self.canvas_height / 2)

    def to_dict(self) -> dict:
        return asdict(self)


def _is_positive_number(value) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        value = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value > 0


def validate_image_dimensions(width, height) -> Tuple[float, float]:
    """
    Check native floor-plan dimensions.

    Returns:
        (width, height) as floats

    Raises:
        InvalidImageDimensions: If either side is missing, non-finite, zero or negative
    """
    if not (_is_positive_number(width) and _is_positive_number(height)):
        raise InvalidImageDimensions(width, height)
    return float(width), float(height)


def validate_canvas_size(width, height) -> Tuple[float, float]:
    """
    Check the drawing surface size.

    Raises:
        ZeroSizeCanvas: If the canvas has not been laid out yet
    """
    if not (_is_positive_number(width) and _is_positive_number(height)):
        raise ZeroSizeCanvas(width, height)
    return float(width), float(height)


def compute_fit(image_width, image_height, canvas_width, canvas_height) -> FitResult:
    """
    Compute the "contain" scale and centering offset for an image inside a canvas.

    scale    = min(canvas_w / image_w, canvas_h / image_h)
    offset_x = (canvas_w - image_w * scale) / 2
    offset_y = (canvas_h - image_h * scale) / 2

    Args:
        image_width: Native floor-plan width in pixels
        image_height: Native floor-plan height in pixels
        canvas_width: Available canvas width
        canvas_height: Available canvas height

    Returns:
        FitResult with the scaled image fully visible and centered

    Raises:
        InvalidImageDimensions: Image side missing/zero/negative
        ZeroSizeCanvas: Canvas side missing/zero/negative
    """
    iw, ih = validate_image_dimensions(image_width, image_height)
    cw, ch = validate_canvas_size(canvas_width, canvas_height)

    scale = min(cw / iw, ch / ih)

    return FitResult(
        scale=scale,
        offset_x=(cw - iw * scale) / 2,
        offset_y=(ch - ih * scale) / 2,
        image_width=iw,
        image_height=ih,
        canvas_width=cw,
        canvas_height=ch
    )
