"""Data models for floor plans and equipment positions"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import NamedTuple


class FileKind(Enum):
    """Source file the floor-plan raster was produced from"""
    IMAGE = 'image'
    PDF = 'pdf'


@dataclass(frozen=True)
class FloorPlan:
    """An uploaded floor-plan image, immutable once created"""
    id: str
    name: str
    image_url: str
    image_width: int
    image_height: int
    company_id: str = ''
    file_kind: FileKind = FileKind.IMAGE
    original_file_url: str = ''
    created_at: float = 0.0

    def to_dict(self) -> dict:
        d = asdict(self)
        d['file_kind'] = self.file_kind.value
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "FloorPlan":
        d = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        d['file_kind'] = FileKind(d.get('file_kind', FileKind.IMAGE.value))
        return cls(**d)


@dataclass
class EquipmentPosition:
    """Where one equipment sits on one floor plan (native pixel units)"""
    equipment_id: str
    floor_plan_id: str
    x: float
    y: float
    updated_at: float = 0.0

    @property
    def key(self):
        return (self.equipment_id, self.floor_plan_id)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "EquipmentPosition":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


class PositionCandidate(NamedTuple):
    """Placed-but-unsaved marker, handed to persistence as-is"""
    equipment_id: str
    floor_plan_id: str
    x: int
    y: int
