"""
Floor-plan and equipment-position store.

Manages:
- Floor plans (created on upload, immutable, deleted with their positions)
- Equipment positions (one per equipment/floor-plan pair, upserted on save)
- "Most recent position" lookup when no floor plan is selected

State is persisted as a single JSON document under the data directory.
"""

import json
import threading
import time
import uuid
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from config import DATA_PATHS
from core.viewport.fit_scale import validate_image_dimensions
from models.floor_plan import EquipmentPosition, FileKind, FloorPlan, PositionCandidate


class UnknownFloorPlan(KeyError):
    """No floor plan with the requested id"""


class FloorPlanRepository:
    """Thread-safe floor-plan/position store backed by a JSON file."""

    def __init__(self, path: Optional[Path] = None, clock: Callable[[], float] = time.time):
        """
        Args:
            path: JSON store file (default: DATA_PATHS.store_path())
            clock: Timestamp source for created_at/updated_at
        """
        self._path = Path(path) if path is not None else DATA_PATHS.store_path()
        self._clock = clock
        self._lock = threading.RLock()

        self._floor_plans: Dict[str, FloorPlan] = {}
        self._positions: Dict[Tuple[str, str], EquipmentPosition] = {}

        self._load_state()

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Floor plans
    # ------------------------------------------------------------------

    def add_floor_plan(
        self,
        name: str,
        image_url: str,
        image_width: int,
        image_height: int,
        company_id: str = '',
        file_kind: FileKind = FileKind.IMAGE,
        original_file_url: str = ''
    ) -> FloorPlan:
        """
        Register an uploaded floor plan.

        Raises:
            InvalidImageDimensions: If width/height are not positive whole pixels
        """
        width, height = validate_image_dimensions(image_width, image_height)
        # Stored as whole pixels; a side that rounds to 0 is still invalid
        width, height = int(round(width)), int(round(height))
        validate_image_dimensions(width, height)

        plan = FloorPlan(
            id=uuid.uuid4().hex,
            name=name,
            image_url=image_url,
            image_width=width,
            image_height=height,
            company_id=company_id,
            file_kind=FileKind(file_kind),
            original_file_url=original_file_url,
            created_at=self._clock()
        )

        with self._lock:
            self._floor_plans[plan.id] = plan
            self._save_state()

        print(f"[FloorPlans] Added '{plan.name}' ({plan.image_width}x{plan.image_height}) as {plan.id}")
        return plan

    def get_floor_plan(self, floor_plan_id: str) -> FloorPlan:
        with self._lock:
            try:
                return self._floor_plans[floor_plan_id]
            except KeyError:
                raise UnknownFloorPlan(floor_plan_id) from None

    def list_floor_plans(self, company_id: Optional[str] = None) -> List[FloorPlan]:
        """Floor plans, newest first, optionally limited to one company"""
        with self._lock:
            plans = [
                p for p in self._floor_plans.values()
                if company_id is None or p.company_id == company_id
            ]
        return sorted(plans, key=lambda p: p.created_at, reverse=True)

    def delete_floor_plan(self, floor_plan_id: str) -> int:
        """
        Delete a floor plan and every position on it.

        Returns:
            Number of positions removed with the plan
        """
        with self._lock:
            if floor_plan_id not in self._floor_plans:
                raise UnknownFloorPlan(floor_plan_id)

            del self._floor_plans[floor_plan_id]
            removed = [k for k in self._positions if k[1] == floor_plan_id]
            for key in removed:
                del self._positions[key]
            self._save_state()

        print(f"[FloorPlans] Deleted {floor_plan_id} ({len(removed)} positions)")
        return len(removed)

    # ------------------------------------------------------------------
    # Equipment positions
    # ------------------------------------------------------------------

    def upsert_position(self, candidate: PositionCandidate) -> EquipmentPosition:
        """Create or update the position of one equipment on one floor plan."""
        with self._lock:
            if candidate.floor_plan_id not in self._floor_plans:
                raise UnknownFloorPlan(candidate.floor_plan_id)

            position = EquipmentPosition(
                equipment_id=candidate.equipment_id,
                floor_plan_id=candidate.floor_plan_id,
                x=candidate.x,
                y=candidate.y,
                updated_at=self._clock()
            )
            self._positions[position.key] = position
            self._save_state()

        return position

    def get_position(self, equipment_id: str, floor_plan_id: str) -> Optional[EquipmentPosition]:
        with self._lock:
            return self._positions.get((equipment_id, floor_plan_id))

    def latest_position(self, equipment_id: str) -> Optional[EquipmentPosition]:
        """Most recently updated position of an equipment across all floor plans"""
        with self._lock:
            candidates = [p for p in self._positions.values() if p.equipment_id == equipment_id]
        if not candidates:
            return None
        return max(candidates, key=lambda p: p.updated_at)

    def positions_on_plan(self, floor_plan_id: str) -> List[EquipmentPosition]:
        with self._lock:
            positions = [p for p in self._positions.values() if p.floor_plan_id == floor_plan_id]
        return sorted(positions, key=lambda p: p.equipment_id)

    def delete_equipment(self, equipment_id: str) -> int:
        """Remove every position of a deleted equipment. Returns count removed."""
        with self._lock:
            removed = [k for k in self._positions if k[0] == equipment_id]
            for key in removed:
                del self._positions[key]
            if removed:
                self._save_state()
        return len(removed)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load_state(self):
        """Load persisted state from disk"""
        if not self._path.exists():
            return

        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")

            plans = [FloorPlan.from_dict(d) for d in data.get('floor_plans', [])]
            positions = [EquipmentPosition.from_dict(d) for d in data.get('positions', [])]
        except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
            print(f"[FloorPlans] Failed to load state from {self._path}: {e}")
            return

        self._floor_plans = {p.id: p for p in plans}
        self._positions = {p.key: p for p in positions if p.floor_plan_id in self._floor_plans}
        print(f"[FloorPlans] Loaded {len(self._floor_plans)} floor plans, "
              f"{len(self._positions)} positions from {self._path}")

    def _save_state(self):
        """Save state to disk (caller holds the lock)"""
        data = {
            'floor_plans': [p.to_dict() for p in self._floor_plans.values()],
            'positions': [p.to_dict() for p in self._positions.values()]
        }

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        tmp_path.replace(self._path)
