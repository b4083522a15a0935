"""Data models"""

from .floor_plan import FileKind, FloorPlan, EquipmentPosition, PositionCandidate

__all__ = ['FileKind', 'FloorPlan', 'EquipmentPosition', 'PositionCandidate']
