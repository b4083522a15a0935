"""Core functionality module"""

from .viewport import (
    FitResult, ViewTransform, ViewportState,
    InvalidImageDimensions, ZeroSizeCanvas,
    compute_fit, forward_map, inverse_map, reduce
)
from .markers import layout_markers, hit_test
from .floor_plans import FloorPlanRepository, FloorPlanImageError

__all__ = ['FitResult', 'ViewTransform', 'ViewportState',
           'InvalidImageDimensions', 'ZeroSizeCanvas',
           'compute_fit', 'forward_map', 'inverse_map', 'reduce',
           'layout_markers', 'hit_test',
           'FloorPlanRepository', 'FloorPlanImageError']
