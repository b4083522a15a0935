"""
Viewport state machine for the floor-plan canvas.

Every input (image load, resize, wheel, drag, click, zoom buttons) is a small
immutable event; reduce(state, event) returns the next state. Pure functions
with no UI framework and no I/O. Bad images and unlaid-out canvases are
recorded on the state instead of raised.

Zoom anchors:
- Wheel zooms about the pointer (the stored point under the cursor stays put)
- Zoom in/out buttons zoom about the event's anchor, or the canvas center
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, FrozenSet, Optional, Tuple

from config import VIEWPORT, CANVAS, DEBUG
from core.viewport.errors import InvalidImageDimensions, ZeroSizeCanvas
from core.viewport.fit_scale import compute_fit
from core.viewport.view_transform import ViewTransform
from models.floor_plan import PositionCandidate

Point = Tuple[float, float]


class InteractionMode(Enum):
    IDLE = 'idle'
    PANNING = 'panning'


@dataclass(frozen=True)
class ViewportState:
    """Everything one canvas needs to map, pan, zoom and place markers."""
    transform: Optional[ViewTransform] = None
    mode: InteractionMode = InteractionMode.IDLE
    placement_mode: bool = False
    equipment_id: Optional[str] = None
    floor_plan_id: Optional[str] = None
    image_size: Optional[Tuple[float, float]] = None
    canvas_size: Tuple[float, float] = (CANVAS.DEFAULT_WIDTH, CANVAS.DEFAULT_HEIGHT)
    drag_origin: Optional[Point] = None
    pan_origin: Optional[Point] = None
    pending: Optional[PositionCandidate] = None
    layout_pending: bool = False
    error: Optional[str] = None

    @property
    def cursor(self) -> str:
        if self.mode is InteractionMode.PANNING:
            return 'move'
        if self.placement_mode:
            return 'crosshair'
        return 'default'

    @property
    def zoom(self) -> float:
        return self.transform.zoom if self.transform else 1.0


# === Events ===

@dataclass(frozen=True)
class ImageLoaded:
    width: float
    height: float
    floor_plan_id: Optional[str] = None


@dataclass(frozen=True)
class ImageLoadFailed:
    reason: str = ''


@dataclass(frozen=True)
class Resize:
    width: float
    height: float


@dataclass(frozen=True)
class Wheel:
    delta_y: float
    x: float
    y: float


@dataclass(frozen=True)
class DragStart:
    x: float
    y: float
    button: str = 'left'
    modifiers: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class DragMove:
    x: float
    y: float


@dataclass(frozen=True)
class DragEnd:
    x: float
    y: float


@dataclass(frozen=True)
class Click:
    x: float
    y: float


@dataclass(frozen=True)
class ZoomIn:
    anchor: Optional[Point] = None


@dataclass(frozen=True)
class ZoomOut:
    anchor: Optional[Point] = None


@dataclass(frozen=True)
class ResetView:
    pass


@dataclass(frozen=True)
class SetPlacementMode:
    enabled: bool
    equipment_id: Optional[str] = None


# === Reducers ===

def _fit_into(state: ViewportState, keep_view: bool) -> ViewportState:
    """(Re)compute the fit for the known image and canvas sizes."""
    if state.image_size is None:
        return state

    try:
        fit = compute_fit(*state.image_size, *state.canvas_size)
    except InvalidImageDimensions as e:
        print(f"[Viewport] {e} - floor plan must be uploaded again")
        return replace(state, transform=None, pending=None, error='invalid_image_dimensions')
    except ZeroSizeCanvas as e:
        if DEBUG:
            print(f"[Viewport] {e} - deferring fit until layout")
        return replace(state, layout_pending=True)

    if keep_view and state.transform is not None:
        transform = state.transform.refit(fit)
    else:
        transform = ViewTransform(fit)

    return replace(state, transform=transform, layout_pending=False, error=None)


def reduce_image_loaded(state: ViewportState, event: ImageLoaded) -> ViewportState:
    state = replace(
        state,
        transform=None,
        image_size=(event.width, event.height),
        floor_plan_id=event.floor_plan_id or state.floor_plan_id,
        mode=InteractionMode.IDLE,
        drag_origin=None,
        pan_origin=None,
        pending=None
    )
    return _fit_into(state, keep_view=False)


def reduce_image_load_failed(state: ViewportState, event: ImageLoadFailed) -> ViewportState:
    print(f"[Viewport] Floor-plan image failed to load: {event.reason or 'unknown error'}")
    return replace(state, transform=None, image_size=None, pending=None, error='image_load_failed')


def reduce_resize(state: ViewportState, event: Resize) -> ViewportState:
    state = replace(state, canvas_size=(event.width, event.height))
    return _fit_into(state, keep_view=True)


def reduce_wheel(state: ViewportState, event: Wheel) -> ViewportState:
    if state.transform is None:
        return state
    try:
        factor = VIEWPORT.WHEEL_ZOOM_BASE ** event.delta_y
    except OverflowError:
        factor = math.inf  # clamped to MAX_ZOOM below
    zoom = state.transform.zoom * factor
    return replace(state, transform=state.transform.zoomed(zoom, anchor=(event.x, event.y)))


def _canvas_center(state: ViewportState) -> Point:
    return (state.canvas_size[0] / 2, state.canvas_size[1] / 2)


def reduce_zoom_in(state: ViewportState, event: ZoomIn) -> ViewportState:
    if state.transform is None:
        return state
    anchor = event.anchor if event.anchor is not None else _canvas_center(state)
    zoom = state.transform.zoom * VIEWPORT.ZOOM_STEP
    return replace(state, transform=state.transform.zoomed(zoom, anchor=anchor))


def reduce_zoom_out(state: ViewportState, event: ZoomOut) -> ViewportState:
    if state.transform is None:
        return state
    anchor = event.anchor if event.anchor is not None else _canvas_center(state)
    zoom = state.transform.zoom / VIEWPORT.ZOOM_STEP
    return replace(state, transform=state.transform.zoomed(zoom, anchor=anchor))


def reduce_reset(state: ViewportState, event: ResetView) -> ViewportState:
    if state.transform is None:
        return state
    return replace(state, transform=state.transform.reset())


def is_pan_trigger(event: DragStart) -> bool:
    """Middle button, or modifier + left button, starts a pan."""
    if event.button in VIEWPORT.PAN_BUTTONS:
        return True
    return event.button == 'left' and VIEWPORT.PAN_MODIFIER in event.modifiers


def reduce_drag_start(state: ViewportState, event: DragStart) -> ViewportState:
    if state.transform is None or not is_pan_trigger(event):
        return state
    return replace(
        state,
        mode=InteractionMode.PANNING,
        drag_origin=(event.x, event.y),
        pan_origin=(state.transform.pan_x, state.transform.pan_y)
    )


def reduce_drag_move(state: ViewportState, event: DragMove) -> ViewportState:
    if state.mode is not InteractionMode.PANNING or state.transform is None:
        return state

    # Absolute recomputation from the drag origin - repeated moves are idempotent
    dx = event.x - state.drag_origin[0]
    dy = event.y - state.drag_origin[1]
    pan_x = state.pan_origin[0] + dx
    pan_y = state.pan_origin[1] + dy
    return replace(state, transform=state.transform.with_pan(pan_x, pan_y))


def reduce_drag_end(state: ViewportState, event: DragEnd) -> ViewportState:
    if state.mode is not InteractionMode.PANNING:
        return state
    state = reduce_drag_move(state, DragMove(event.x, event.y))
    return replace(state, mode=InteractionMode.IDLE, drag_origin=None, pan_origin=None)


def reduce_click(state: ViewportState, event: Click) -> ViewportState:
    if (state.mode is not InteractionMode.IDLE or not state.placement_mode
            or state.transform is None or state.equipment_id is None
            or state.floor_plan_id is None):
        return state

    x, y = state.transform.inverse(event.x, event.y)
    if not state.transform.contains_stored(x, y):
        if DEBUG:
            print(f"[Viewport] Click ({event.x:.1f}, {event.y:.1f}) is off the floor plan, ignored")
        return state

    candidate = PositionCandidate(
        equipment_id=state.equipment_id,
        floor_plan_id=state.floor_plan_id,
        x=int(round(x)),
        y=int(round(y))
    )
    return replace(state, pending=candidate)


def reduce_placement_mode(state: ViewportState, event: SetPlacementMode) -> ViewportState:
    if not event.enabled:
        return replace(state, placement_mode=False, pending=None)
    return replace(
        state,
        placement_mode=True,
        equipment_id=event.equipment_id or state.equipment_id
    )


REDUCERS: Dict[type, Callable] = {
    ImageLoaded: reduce_image_loaded,
    ImageLoadFailed: reduce_image_load_failed,
    Resize: reduce_resize,
    Wheel: reduce_wheel,
    DragStart: reduce_drag_start,
    DragMove: reduce_drag_move,
    DragEnd: reduce_drag_end,
    Click: reduce_click,
    ZoomIn: reduce_zoom_in,
    ZoomOut: reduce_zoom_out,
    ResetView: reduce_reset,
    SetPlacementMode: reduce_placement_mode,
}


def reduce(state: ViewportState, event) -> ViewportState:
    """Apply one input event and return the next state."""
    reducer = REDUCERS.get(type(event))
    if reducer is None:
        raise TypeError(f"Unsupported viewport event: {type(event).__name__}")
    return reducer(state, event)
