"""
QQuickPaintedItem that renders a floor plan with equipment markers.

The item owns no transform math: every Qt input is turned into a viewport
event, reduced into a new ViewportState, and paint() draws whatever that
state says.
"""

from typing import Dict, List, Optional

import numpy as np
from PySide6.QtCore import Qt, QRectF, QPointF, Signal, Slot, Property
from PySide6.QtGui import QPainter, QColor, QPen, QBrush, QImage, QFont
from PySide6.QtQuick import QQuickPaintedItem

from config import CANVAS, MARKERS, DEBUG
from core.markers.marker_layout import layout_markers, hit_test
from core.viewport.viewport_reducer import (
    ViewportState, InteractionMode, reduce,
    ImageLoaded, ImageLoadFailed, Resize, Wheel, DragStart, DragMove, DragEnd,
    Click, ZoomIn, ZoomOut, ResetView, SetPlacementMode
)
from models.floor_plan import FloorPlan

BUTTON_NAMES = {
    Qt.MouseButton.LeftButton: 'left',
    Qt.MouseButton.MiddleButton: 'middle',
    Qt.MouseButton.RightButton: 'right',
}

CURSORS = {
    'default': Qt.CursorShape.ArrowCursor,
    'crosshair': Qt.CursorShape.CrossCursor,
    'move': Qt.CursorShape.ClosedHandCursor,
}


def bgr_to_qimage(image: np.ndarray) -> QImage:
    """Copy an OpenCV BGR array into a QImage"""
    image = np.ascontiguousarray(image)
    h, w = image.shape[:2]
    if image.ndim == 2:
        qimage = QImage(image.data, w, h, image.strides[0], QImage.Format.Format_Grayscale8)
    else:
        qimage = QImage(image.data, w, h, image.strides[0], QImage.Format.Format_BGR888)
    return qimage.copy()  # detach from the numpy buffer


class FloorPlanCanvas(QQuickPaintedItem):
    """
    Floor-plan canvas exposed to QML:
        FloorPlanCanvas {
            objectName: "canvas"
            anchors.fill: parent
        }
    """

    positionCandidateChanged = Signal(str, int, int)  # equipment_id, x, y (stored space)
    zoomChanged = Signal()
    placementModeChanged = Signal()
    markerClicked = Signal(str)  # equipment_id
    errorChanged = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)

        self.setAntialiasing(True)
        self.setAcceptedMouseButtons(
            Qt.MouseButton.LeftButton | Qt.MouseButton.MiddleButton | Qt.MouseButton.RightButton
        )

        self._state = ViewportState()
        self._image: Optional[QImage] = None
        self._plan: Optional[FloorPlan] = None
        self._positions: List = []
        self._labels: Dict[str, str] = {}

    # ------------------------------------------------------------------
    # Public API (Python side)
    # ------------------------------------------------------------------

    def set_floor_plan(self, plan: FloorPlan, image: Optional[np.ndarray],
                       positions: List, labels: Optional[Dict[str, str]] = None):
        """Show a floor plan. `image` is None when loading failed."""
        self._plan = plan
        self._positions = list(positions)
        self._labels = labels or {}

        if image is None:
            self._image = None
            self._dispatch(ImageLoadFailed(reason=f"could not load {plan.image_url}"))
            return

        self._image = bgr_to_qimage(image)
        self._dispatch(Resize(self.width() or CANVAS.DEFAULT_WIDTH,
                              self.height() or CANVAS.DEFAULT_HEIGHT))
        # Trust the decoded pixels over the stored dimensions
        self._dispatch(ImageLoaded(self._image.width(), self._image.height(), plan.id))

    def set_positions(self, positions: List):
        self._positions = list(positions)
        self.update()

    @property
    def state(self) -> ViewportState:
        return self._state

    # ------------------------------------------------------------------
    # QML API
    # ------------------------------------------------------------------

    @Property(float, notify=zoomChanged)
    def zoom(self):
        return self._state.zoom

    @Property(bool, notify=placementModeChanged)
    def placementMode(self):
        return self._state.placement_mode

    @Slot()
    def zoomIn(self):
        self._dispatch(ZoomIn())

    @Slot()
    def zoomOut(self):
        self._dispatch(ZoomOut())

    @Slot()
    def resetView(self):
        self._dispatch(ResetView())

    @Slot(bool, str)
    def setPlacementMode(self, enabled: bool, equipment_id: str):
        self._dispatch(SetPlacementMode(enabled, equipment_id or None))

    # ------------------------------------------------------------------
    # State plumbing
    # ------------------------------------------------------------------

    def _dispatch(self, event):
        old = self._state
        self._state = reduce(old, event)
        new = self._state

        if DEBUG:
            print(f"[FloorPlanCanvas] {type(event).__name__} -> zoom={new.zoom:.3f} mode={new.mode.value}")

        if new.zoom != old.zoom:
            self.zoomChanged.emit()
        if new.placement_mode != old.placement_mode:
            self.placementModeChanged.emit()
        if new.pending is not None and new.pending != old.pending:
            p = new.pending
            self.positionCandidateChanged.emit(p.equipment_id, p.x, p.y)
        if new.error and new.error != old.error:
            self.errorChanged.emit(new.error)
        if new.cursor != old.cursor:
            self.setCursor(CURSORS[new.cursor])

        self.update()

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------

    def geometryChange(self, new_geometry: QRectF, old_geometry: QRectF):
        super().geometryChange(new_geometry, old_geometry)
        if new_geometry.size() != old_geometry.size():
            self._dispatch(Resize(new_geometry.width(), new_geometry.height()))

    def mousePressEvent(self, event):
        pos = event.position()

        modifiers = set()
        if event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            modifiers.add('ctrl')

        button = BUTTON_NAMES.get(event.button(), 'other')
        self._dispatch(DragStart(pos.x(), pos.y(), button, frozenset(modifiers)))
        event.accept()

    def mouseMoveEvent(self, event):
        pos = event.position()
        self._dispatch(DragMove(pos.x(), pos.y()))
        event.accept()

    def mouseReleaseEvent(self, event):
        pos = event.position()
        if self._state.mode is InteractionMode.PANNING:
            self._dispatch(DragEnd(pos.x(), pos.y()))
        elif event.button() == Qt.MouseButton.LeftButton:
            hit = None
            if not self._state.placement_mode and self._state.transform is not None:
                hit = hit_test(self._positions, self._state.transform, pos.x(), pos.y())
            if hit is not None:
                self.markerClicked.emit(hit)
            else:
                self._dispatch(Click(pos.x(), pos.y()))
        event.accept()

    def wheelEvent(self, event):
        pos = event.position()
        # Qt: positive angleDelta = wheel away from user; browsers report the opposite sign
        self._dispatch(Wheel(-event.angleDelta().y(), pos.x(), pos.y()))
        event.accept()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def paint(self, painter: QPainter):
        painter.fillRect(0, 0, int(self.width()), int(self.height()), QColor(CANVAS.BACKGROUND))

        transform = self._state.transform
        if transform is None or self._image is None:
            return

        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.drawImage(QRectF(*transform.image_rect()), self._image)

        markers = layout_markers(
            self._positions, transform, self.width(), self.height(),
            labels=self._labels, pending=self._state.pending
        )

        pen = QPen(QColor(MARKERS.STROKE))
        pen.setWidth(MARKERS.STROKE_WIDTH)
        font = QFont()
        font.setPointSize(9)
        painter.setFont(font)

        r = MARKERS.RADIUS
        for marker in markers:
            fill = MARKERS.PENDING_FILL if marker['pending'] else MARKERS.FILL
            painter.setPen(pen)
            painter.setBrush(QBrush(QColor(fill)))
            painter.drawEllipse(QPointF(marker['x'], marker['y']), r, r)

            painter.setPen(QColor(MARKERS.LABEL_COLOR))
            painter.drawText(QPointF(marker['x'] + MARKERS.LABEL_OFFSET_X, marker['y'] + 4),
                             marker['label'])
