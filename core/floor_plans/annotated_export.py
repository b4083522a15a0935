"""Annotated floor-plan export: markers drawn with OpenCV, PDF assembled with ReportLab."""

from io import BytesIO
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import cv2
import numpy as np
from reportlab.lib.pagesizes import A4, letter, landscape, portrait
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as rl_canvas

from config import EXPORT
from models.floor_plan import FloorPlan


def _marker_radius(image: np.ndarray) -> int:
    h, w = image.shape[:2]
    return max(EXPORT.MIN_MARKER_RADIUS, int(round(max(w, h) * EXPORT.MARKER_RADIUS_RATIO)))


def render_annotated_floor_plan(
    image: np.ndarray,
    positions: Iterable,
    labels: Optional[Dict[str, str]] = None
) -> np.ndarray:
    """
    Draw equipment markers on a copy of the native-resolution floor plan.

    Positions are already in stored space, so no view transform is involved.

    Args:
        image: BGR (or grayscale) floor-plan image
        positions: EquipmentPosition-like objects
        labels: Optional equipment_id -> label

    Returns:
        New BGR image with markers and labels
    """
    labels = labels or {}
    if image.ndim == 2:
        annotated = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    else:
        annotated = image.copy()

    radius = _marker_radius(annotated)
    font_scale = radius / 12
    thickness = max(1, radius // 6)

    for position in positions:
        center = (int(round(position.x)), int(round(position.y)))
        cv2.circle(annotated, center, radius, EXPORT.MARKER_BGR, -1, cv2.LINE_AA)
        cv2.circle(annotated, center, radius, EXPORT.OUTLINE_BGR, thickness, cv2.LINE_AA)

        label = labels.get(position.equipment_id, position.equipment_id)
        (text_w, text_h), baseline = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, font_scale, thickness)
        origin = (center[0] + radius + radius // 2, center[1] + text_h // 2)
        cv2.rectangle(
            annotated,
            (origin[0] - 2, origin[1] - text_h - 2),
            (origin[0] + text_w + 2, origin[1] + baseline + 2),
            EXPORT.LABEL_BACKGROUND_BGR, -1
        )
        cv2.putText(annotated, label, origin, cv2.FONT_HERSHEY_SIMPLEX,
                    font_scale, EXPORT.LABEL_BGR, thickness, cv2.LINE_AA)

    return annotated


def _get_page_size(name: str):
    """Return ReportLab page size tuple."""
    return A4 if name.lower() == "a4" else letter


def export_floor_plan_pdf(
    image: np.ndarray,
    floor_plan: FloorPlan,
    positions: List,
    labels: Optional[Dict[str, str]],
    output_path: Union[str, Path]
) -> Path:
    """
    Export a floor plan with its equipment as a two-page PDF.

    Page 1: annotated floor plan, fitted to the page (landscape for wide plans)
    Page 2: numbered equipment list
    """
    labels = labels or {}
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    base = _get_page_size(EXPORT.PAGE_SIZE)
    if floor_plan.image_width > floor_plan.image_height:
        page_w, page_h = landscape(base)
    else:
        page_w, page_h = portrait(base)
    margin = EXPORT.MARGIN_MM * mm

    annotated = render_annotated_floor_plan(image, positions, labels)
    ok, encoded = cv2.imencode('.png', annotated)
    if not ok:
        raise RuntimeError("Failed to encode annotated floor plan")

    # Fit image into the usable area, preserving aspect ratio
    h, w = annotated.shape[:2]
    usable_w = page_w - 2 * margin
    usable_h = page_h - 2 * margin
    scale = min(usable_w / w, usable_h / h)
    draw_w, draw_h = w * scale, h * scale
    x = (page_w - draw_w) / 2
    y = (page_h - draw_h) / 2

    c = rl_canvas.Canvas(str(output_path), pagesize=(page_w, page_h))
    c.setTitle(floor_plan.name)
    c.drawImage(ImageReader(BytesIO(encoded.tobytes())), x, y, draw_w, draw_h)
    c.showPage()

    # ReportLab origin is bottom-left, so the list runs downward from the top
    c.setFont("Helvetica-Bold", EXPORT.TITLE_FONT_SIZE)
    cursor_y = page_h - margin - EXPORT.TITLE_FONT_SIZE
    c.drawString(margin, cursor_y, EXPORT.TITLE)
    cursor_y -= EXPORT.LIST_LINE_SPACING * 2

    c.setFont("Helvetica", EXPORT.LIST_FONT_SIZE)
    for index, position in enumerate(positions, start=1):
        if cursor_y < margin:
            c.showPage()
            c.setFont("Helvetica", EXPORT.LIST_FONT_SIZE)
            cursor_y = page_h - margin - EXPORT.LIST_FONT_SIZE
        label = labels.get(position.equipment_id, position.equipment_id)
        c.drawString(margin, cursor_y, f"{index}. {label}")
        cursor_y -= EXPORT.LIST_LINE_SPACING

    c.save()
    print(f"[Export] Wrote {output_path} ({len(positions)} equipment)")
    return output_path
