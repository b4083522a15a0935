"""Application state management"""

from typing import Optional

from core.floor_plans.floor_plan_repository import FloorPlanRepository


class PlannerState:
    """Global application state shared by the API routes"""

    def __init__(self, repository: Optional[FloorPlanRepository] = None):
        self.repository: Optional[FloorPlanRepository] = repository
        self.is_initialized = repository is not None

    def initialize(self, repository: FloorPlanRepository):
        self.repository = repository
        self.is_initialized = True
