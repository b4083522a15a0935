"""Floor-plan storage, image loading and export"""

from .floor_plan_repository import FloorPlanRepository, UnknownFloorPlan
from .image_dimensions import (
    FloorPlanImageError,
    decode_image,
    read_image_dimensions,
    load_image_file,
    image_dimensions_from_url
)
from .annotated_export import render_annotated_floor_plan, export_floor_plan_pdf

__all__ = [
    'FloorPlanRepository', 'UnknownFloorPlan',
    'FloorPlanImageError', 'decode_image', 'read_image_dimensions',
    'load_image_file', 'image_dimensions_from_url',
    'render_annotated_floor_plan', 'export_floor_plan_pdf'
]
