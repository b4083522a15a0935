#!/usr/bin/env python3
"""
Floor-Plan Placement - QML viewer
Show a floor plan, pan/zoom it and place one equipment marker.

Usage:
    python app_qml.py <floor_plan_id> [equipment_id]
"""

import signal
import sys
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from config import DATA_PATHS
from core.floor_plans import FloorPlanRepository, FloorPlanImageError, load_image_file
from core.floor_plans.floor_plan_repository import UnknownFloorPlan
from core.floor_plans.image_dimensions import load_image_url
from models.floor_plan import PositionCandidate

from PySide6.QtCore import QObject, QByteArray, QTimer, QUrl, Signal, Slot, Property
from PySide6.QtGui import QGuiApplication
from PySide6.QtQml import QQmlApplicationEngine, qmlRegisterType

from qml.FloorPlanCanvas import FloorPlanCanvas

QML_SOURCE = b"""
import QtQuick
import QtQuick.Controls
import QtQuick.Layouts
import FloorPlan 1.0

ApplicationWindow {
    id: window
    visible: true
    width: 1000
    height: 760
    title: backend.title

    header: ToolBar {
        RowLayout {
            anchors.fill: parent
            ToolButton { text: "+"; onClicked: canvas.zoomIn() }
            ToolButton { text: "-"; onClicked: canvas.zoomOut() }
            ToolButton { text: "Reset"; onClicked: canvas.resetView() }
            Label { text: "Zoom: " + Math.round(canvas.zoom * 100) + "%" }
            ToolButton {
                text: canvas.placementMode ? "Stop placing" : "Place"
                enabled: backend.equipmentId !== ""
                onClicked: canvas.setPlacementMode(!canvas.placementMode, backend.equipmentId)
            }
            ToolButton {
                text: "Save position"
                enabled: backend.hasPending
                onClicked: backend.save()
            }
            Label { text: backend.status; Layout.fillWidth: true }
        }
    }

    FloorPlanCanvas {
        id: canvas
        objectName: "canvas"
        anchors.fill: parent
    }

    footer: Label {
        padding: 4
        text: "Ctrl+drag or middle-drag to pan - mouse wheel to zoom"
    }
}
"""


class PlacementBackend(QObject):
    """Bridges the canvas' unsaved marker to the floor-plan store."""

    statusChanged = Signal()
    pendingChanged = Signal()

    def __init__(self, repository: FloorPlanRepository, floor_plan_id: str,
                 equipment_id: str, parent=None):
        super().__init__(parent)
        self._repository = repository
        self._floor_plan_id = floor_plan_id
        self._equipment_id = equipment_id
        self._pending: Optional[PositionCandidate] = None
        self._status = ""
        self._title = "Floor plan"
        self.canvas: Optional[FloorPlanCanvas] = None

    @Property(str, constant=True)
    def equipmentId(self):
        return self._equipment_id

    @Property(str, notify=statusChanged)
    def status(self):
        return self._status

    @Property(str, notify=statusChanged)
    def title(self):
        return self._title

    @Property(bool, notify=pendingChanged)
    def hasPending(self):
        return self._pending is not None

    def set_status(self, text: str):
        self._status = text
        self.statusChanged.emit()

    def set_title(self, text: str):
        self._title = text
        self.statusChanged.emit()

    @Slot(str, int, int)
    def on_candidate(self, equipment_id: str, x: int, y: int):
        self._pending = PositionCandidate(equipment_id, self._floor_plan_id, x, y)
        self.set_status(f"Position: X={x}, Y={y} (unsaved)")
        self.pendingChanged.emit()

    @Slot(str)
    def on_error(self, error: str):
        self.set_status(f"Error: {error}")

    @Slot()
    def save(self):
        if self._pending is None:
            return
        position = self._repository.upsert_position(self._pending)
        print(f"[Placement] Saved {position.equipment_id} at ({position.x}, {position.y})")
        self._pending = None
        self.pendingChanged.emit()
        self.set_status(f"Saved: X={position.x}, Y={position.y}")
        if self.canvas is not None:
            self.canvas.set_positions(self._repository.positions_on_plan(self._floor_plan_id))
            self.canvas.setPlacementMode(False, "")


def load_plan_image(image_url: str):
    """Local path or http(s) URL -> BGR image, None on failure"""
    try:
        if image_url.startswith(('http://', 'https://')):
            return load_image_url(image_url)
        return load_image_file(image_url)
    except FloorPlanImageError as e:
        print(f"[ERROR] {e}")
        return None


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)

    floor_plan_id = sys.argv[1]
    equipment_id = sys.argv[2] if len(sys.argv) > 2 else ""

    print("Floor-Plan Placement (QML) - Initializing...")
    repository = FloorPlanRepository(DATA_PATHS.store_path())

    try:
        plan = repository.get_floor_plan(floor_plan_id)
    except UnknownFloorPlan:
        print(f"ERROR: Unknown floor plan: {floor_plan_id}")
        sys.exit(1)

    app = QGuiApplication(sys.argv)
    qmlRegisterType(FloorPlanCanvas, "FloorPlan", 1, 0, "FloorPlanCanvas")

    backend = PlacementBackend(repository, floor_plan_id, equipment_id, parent=app)
    backend.set_title(f"{plan.name} ({plan.image_width}x{plan.image_height})")

    engine = QQmlApplicationEngine()
    engine.rootContext().setContextProperty("backend", backend)
    engine.warnings.connect(lambda warnings: [print(f"[QML Warning] {w.toString()}") for w in warnings])
    engine.loadData(QByteArray(QML_SOURCE), QUrl("inline:FloorPlanViewer.qml"))

    if not engine.rootObjects():
        print("ERROR: Failed to load QML!")
        sys.exit(1)

    root_window = engine.rootObjects()[0]
    canvas = root_window.findChild(FloorPlanCanvas, "canvas")
    if canvas is None:
        print("[ERROR] Could not find FloorPlanCanvas with objectName 'canvas'")
        sys.exit(1)

    backend.canvas = canvas
    canvas.positionCandidateChanged.connect(backend.on_candidate)
    canvas.errorChanged.connect(backend.on_error)

    image = load_plan_image(plan.image_url)
    canvas.set_floor_plan(plan, image, repository.positions_on_plan(floor_plan_id))

    if equipment_id:
        existing = repository.get_position(equipment_id, floor_plan_id)
        if existing is not None:
            backend.set_status(f"Position: X={existing.x}, Y={existing.y}")

    print("QML viewer launched successfully!")

    # Allow Ctrl+C to work
    signal.signal(signal.SIGINT, lambda sig, frame: app.quit())
    timer = QTimer()
    timer.timeout.connect(lambda: None)
    timer.start(100)

    sys.exit(app.exec())


if __name__ == '__main__':
    main()
