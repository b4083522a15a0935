"""Coordinate transform engine for the floor-plan canvas"""

from .errors import ViewportError, InvalidImageDimensions, ZeroSizeCanvas
from .fit_scale import FitResult, compute_fit, validate_image_dimensions
from .view_transform import ViewTransform, clamp_zoom, forward_map, inverse_map
from .viewport_reducer import ViewportState, InteractionMode, reduce

__all__ = [
    'ViewportError', 'InvalidImageDimensions', 'ZeroSizeCanvas',
    'FitResult', 'compute_fit', 'validate_image_dimensions',
    'ViewTransform', 'clamp_zoom', 'forward_map', 'inverse_map',
    'ViewportState', 'InteractionMode', 'reduce'
]
