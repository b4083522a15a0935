"""
Place equipment markers on the canvas and hit-test pointer events against them.
Pure functions - no state, no threads.
"""

from typing import Dict, Iterable, List, Optional

import numpy as np

from config import MARKERS
from core.viewport.view_transform import ViewTransform
from models.floor_plan import PositionCandidate


def _as_arrays(positions):
    """Split positions (anything with equipment_id/x/y) into ids + (N, 2) array."""
    positions = list(positions)
    ids = [p.equipment_id for p in positions]
    if not positions:
        return ids, np.empty((0, 2), dtype=np.float64)
    coords = np.array([(p.x, p.y) for p in positions], dtype=np.float64)
    return ids, coords


def layout_markers(
    positions: Iterable,
    transform: ViewTransform,
    canvas_width: float,
    canvas_height: float,
    labels: Optional[Dict[str, str]] = None,
    pending: Optional[PositionCandidate] = None
) -> List[Dict]:
    """
    Transform saved positions to viewport coordinates for drawing.

    Args:
        positions: Saved positions in stored space (EquipmentPosition-like)
        transform: Current view transform
        canvas_width: Canvas width (markers outside are dropped)
        canvas_height: Canvas height
        labels: Optional equipment_id -> display label
        pending: Placed-but-unsaved marker; replaces the saved marker for
                 the same equipment

    Returns:
        List of dicts:
        - equipment_id
        - x, y: Viewport coordinates
        - label: Display label (equipment id when no label given)
        - pending: True for the unsaved candidate
    """
    labels = labels or {}
    positions = list(positions)
    if pending is not None:
        positions = [p for p in positions if p.equipment_id != pending.equipment_id]
        positions.append(pending)

    ids, coords = _as_arrays(positions)
    if not ids:
        return []

    screen = transform.forward_points(coords)

    # Keep markers whose circle touches the canvas
    r = MARKERS.RADIUS
    in_view = (
        (screen[:, 0] >= -r) & (screen[:, 0] <= canvas_width + r) &
        (screen[:, 1] >= -r) & (screen[:, 1] <= canvas_height + r)
    )

    visible = []
    for idx in np.where(in_view)[0]:
        equipment_id = ids[idx]
        visible.append({
            'equipment_id': equipment_id,
            'x': float(screen[idx, 0]),
            'y': float(screen[idx, 1]),
            'label': labels.get(equipment_id, equipment_id),
            'pending': pending is not None and positions[idx] is pending
        })

    return visible


def hit_test(
    positions: Iterable,
    transform: ViewTransform,
    x: float,
    y: float,
    radius: float = MARKERS.RADIUS + MARKERS.HIT_SLOP
) -> Optional[str]:
    """
    Find the marker under a pointer.

    Args:
        positions: Saved positions in stored space
        transform: Current view transform
        x, y: Pointer in viewport space
        radius: Hit radius in viewport pixels (markers keep a constant on-screen size)

    Returns:
        equipment_id of the nearest marker within radius, or None
    """
    ids, coords = _as_arrays(positions)
    if not ids:
        return None

    screen = transform.forward_points(coords)
    distances = np.hypot(screen[:, 0] - x, screen[:, 1] - y)
    nearest = int(np.argmin(distances))

    if distances[nearest] <= radius:
        return ids[nearest]
    return None
