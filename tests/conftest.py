"""
Pytest configuration and shared fixtures.
"""

import cv2
import numpy as np
import pytest

from core.floor_plans.floor_plan_repository import FloorPlanRepository
from core.viewport.fit_scale import compute_fit
from core.viewport.view_transform import ViewTransform
from core.viewport.viewport_reducer import ViewportState, reduce, ImageLoaded, Resize


# === Geometry Fixtures ===

@pytest.fixture
def fit_4000x3000():
    """4000x3000 floor plan in a 1200x800 canvas (height-bound fit)."""
    return compute_fit(4000, 3000, 1200, 800)


@pytest.fixture
def identity_view(fit_4000x3000):
    """Transform at zoom=1, pan=(0, 0)."""
    return ViewTransform(fit_4000x3000)


@pytest.fixture
def loaded_state():
    """Viewport state with a 4000x3000 plan laid out in a 1200x800 canvas."""
    state = ViewportState(floor_plan_id='plan-1', equipment_id='eq-1')
    state = reduce(state, Resize(1200, 800))
    return reduce(state, ImageLoaded(4000, 3000, 'plan-1'))


# === Store Fixtures ===

class FakeClock:
    """Monotonic clock advancing one second per call."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        self.now += 1.0
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repository(tmp_path, clock):
    """Floor-plan store persisted in a temporary directory."""
    return FloorPlanRepository(tmp_path / 'floor_plans.json', clock=clock)


@pytest.fixture
def floor_plan(repository):
    return repository.add_floor_plan(
        name='Ground floor',
        image_url='https://storage.example.com/floorplans/ground.png',
        image_width=4000,
        image_height=3000,
        company_id='company-1'
    )


# === Image Fixtures ===

@pytest.fixture
def plan_image():
    """Small synthetic floor plan (BGR, 400x300) with a dark wall outline."""
    image = np.full((300, 400, 3), 255, dtype=np.uint8)
    cv2.rectangle(image, (20, 20), (380, 280), (40, 40, 40), 4)
    return image


@pytest.fixture
def plan_png_bytes(plan_image):
    ok, encoded = cv2.imencode('.png', plan_image)
    assert ok
    return encoded.tobytes()
