"""Flask API routes - floor plans, equipment positions and transform math"""

import math
from pathlib import PurePosixPath
from urllib.parse import urlparse

from flask import Flask, jsonify, request, send_file
from flask_cors import CORS

from config import SERVER, DATA_PATHS, FLOOR_PLANS
from api.state import PlannerState
from core.floor_plans.annotated_export import export_floor_plan_pdf
from core.floor_plans.floor_plan_repository import UnknownFloorPlan
from core.floor_plans.image_dimensions import (
    FloorPlanImageError, image_dimensions_from_url, load_image_url
)
from core.viewport.errors import InvalidImageDimensions, ZeroSizeCanvas
from core.viewport.fit_scale import compute_fit
from core.viewport.view_transform import ViewTransform
from models.floor_plan import FileKind, PositionCandidate


class BadPayload(ValueError):
    """Request body is missing fields or has the wrong types"""


def _json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise BadPayload('Expected a JSON object body')
    return body


def _number(body: dict, key: str, default=None) -> float:
    value = body.get(key, default)
    if value is None:
        raise BadPayload(f"Missing field: {key}")
    if isinstance(value, bool):
        raise BadPayload(f"Field {key} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise BadPayload(f"Field {key} must be a number") from None
    if not math.isfinite(number):
        raise BadPayload(f"Field {key} must be finite")
    return number


def _points(body: dict):
    points = body.get('points')
    if points is None and 'x' in body and 'y' in body:
        points = [[body['x'], body['y']]]
    if not isinstance(points, list) or not points:
        raise BadPayload('Expected "points": [[x, y], ...] or "x"/"y"')
    try:
        parsed = [(float(p[0]), float(p[1])) for p in points]
    except (TypeError, ValueError, IndexError):
        raise BadPayload('Each point must be [x, y]') from None
    if not all(math.isfinite(x) and math.isfinite(y) for x, y in parsed):
        raise BadPayload('Point coordinates must be finite')
    return parsed


def _check_image_extension(image_url: str):
    """Signed URLs carry a query string, so only the path is checked"""
    if not isinstance(image_url, str):
        raise BadPayload('Field image_url must be a string')
    suffix = PurePosixPath(urlparse(image_url).path).suffix.lower()
    if suffix not in FLOOR_PLANS.ALLOWED_EXTENSIONS:
        raise BadPayload(f"Unsupported floor-plan image type: {suffix or image_url}")


def _transform_from(body: dict) -> ViewTransform:
    fit = compute_fit(
        body.get('image_width'),
        body.get('image_height'),
        body.get('canvas_width'),
        body.get('canvas_height')
    )
    return ViewTransform(
        fit,
        zoom=_number(body, 'zoom', 1.0),
        pan_x=_number(body, 'pan_x', 0.0),
        pan_y=_number(body, 'pan_y', 0.0)
    )


def create_app(state: PlannerState):
    """
    Create Flask application.

    The transform endpoints are stateless: every request carries the image
    size, canvas size, zoom and pan it wants mapped.
    """
    app = Flask(__name__)

    if SERVER.CORS_ENABLED:
        CORS(app)

    # === Error mapping ===

    @app.errorhandler(BadPayload)
    def handle_bad_payload(e):
        return jsonify({'success': False, 'error': str(e)}), 400

    @app.errorhandler(InvalidImageDimensions)
    def handle_invalid_dimensions(e):
        return jsonify({
            'success': False,
            'error': 'invalid_image_dimensions',
            'message': str(e)
        }), 400

    @app.errorhandler(ZeroSizeCanvas)
    def handle_zero_canvas(e):
        return jsonify({
            'success': False,
            'error': 'zero_size_canvas',
            'message': 'Canvas not laid out yet - retry after layout'
        }), 409

    @app.errorhandler(UnknownFloorPlan)
    def handle_unknown_floor_plan(e):
        return jsonify({
            'success': False,
            'error': 'unknown_floor_plan',
            'floor_plan_id': e.args[0] if e.args else None
        }), 404

    @app.errorhandler(FloorPlanImageError)
    def handle_image_error(e):
        return jsonify({'success': False, 'error': 'image_unavailable', 'message': str(e)}), 502

    # === Status ===

    @app.route('/status', methods=['GET'])
    def get_status():
        """
        System health check.

        Returns:
            ready: bool - Store loaded
            floor_plans: int - Number of floor plans
        """
        repo = state.repository
        return jsonify({
            'ready': state.is_initialized,
            'floor_plans': len(repo.list_floor_plans()) if repo else 0
        })

    # === Floor plans ===

    @app.route('/floor-plans', methods=['GET'])
    def list_floor_plans():
        company_id = request.args.get('company_id')
        plans = state.repository.list_floor_plans(company_id)
        return jsonify({'floor_plans': [p.to_dict() for p in plans]})

    @app.route('/floor-plans', methods=['POST'])
    def create_floor_plan():
        """
        Register an uploaded floor plan.

        Body: name, image_url, company_id, file_kind ('image'|'pdf'),
              original_file_url, image_width/image_height (fetched from
              image_url when omitted)
        """
        body = _json_body()
        name = body.get('name')
        image_url = body.get('image_url')
        if not name or not image_url:
            raise BadPayload('Fields name and image_url are required')
        _check_image_extension(image_url)

        try:
            file_kind = FileKind(body.get('file_kind', FileKind.IMAGE.value))
        except ValueError:
            raise BadPayload(f"Unknown file_kind: {body.get('file_kind')}") from None

        width = body.get('image_width')
        height = body.get('image_height')
        if width is None and height is None:
            width, height = image_dimensions_from_url(image_url)

        plan = state.repository.add_floor_plan(
            name=name,
            image_url=image_url,
            image_width=width,
            image_height=height,
            company_id=body.get('company_id', ''),
            file_kind=file_kind,
            original_file_url=body.get('original_file_url', '')
        )
        return jsonify({'success': True, 'floor_plan': plan.to_dict()}), 201

    @app.route('/floor-plans/<floor_plan_id>', methods=['GET'])
    def get_floor_plan(floor_plan_id):
        plan = state.repository.get_floor_plan(floor_plan_id)
        return jsonify({'floor_plan': plan.to_dict()})

    @app.route('/floor-plans/<floor_plan_id>', methods=['DELETE'])
    def delete_floor_plan(floor_plan_id):
        removed = state.repository.delete_floor_plan(floor_plan_id)
        return jsonify({'success': True, 'positions_removed': removed})

    @app.route('/floor-plans/<floor_plan_id>/export', methods=['GET'])
    def export_floor_plan(floor_plan_id):
        """Annotated floor plan + equipment list as PDF"""
        plan = state.repository.get_floor_plan(floor_plan_id)
        positions = state.repository.positions_on_plan(floor_plan_id)
        image = load_image_url(plan.image_url)

        output = export_floor_plan_pdf(
            image, plan, positions, labels=None,
            output_path=DATA_PATHS.export_path(floor_plan_id)
        )
        return send_file(output, mimetype='application/pdf', as_attachment=True,
                         download_name=f"{plan.name}-equipment.pdf")

    # === Equipment positions ===

    @app.route('/floor-plans/<floor_plan_id>/positions', methods=['GET'])
    def list_positions(floor_plan_id):
        state.repository.get_floor_plan(floor_plan_id)
        positions = state.repository.positions_on_plan(floor_plan_id)
        return jsonify({'positions': [p.to_dict() for p in positions]})

    @app.route('/floor-plans/<floor_plan_id>/positions/<equipment_id>', methods=['PUT'])
    def save_position(floor_plan_id, equipment_id):
        body = _json_body()
        plan = state.repository.get_floor_plan(floor_plan_id)

        x = _number(body, 'x')
        y = _number(body, 'y')
        if not (0 <= x <= plan.image_width and 0 <= y <= plan.image_height):
            raise BadPayload(f"Position ({x}, {y}) is outside the floor plan "
                             f"({plan.image_width}x{plan.image_height})")

        candidate = PositionCandidate(equipment_id, floor_plan_id, int(round(x)), int(round(y)))
        position = state.repository.upsert_position(candidate)
        return jsonify({'success': True, 'position': position.to_dict()})

    @app.route('/equipment/<equipment_id>/position', methods=['GET'])
    def get_equipment_position(equipment_id):
        """Position on ?floor_plan_id=, or the most recent one on any floor plan"""
        floor_plan_id = request.args.get('floor_plan_id')
        if floor_plan_id:
            state.repository.get_floor_plan(floor_plan_id)
            position = state.repository.get_position(equipment_id, floor_plan_id)
        else:
            position = state.repository.latest_position(equipment_id)

        if position is None:
            return jsonify({'success': False, 'error': 'no_position'}), 404
        return jsonify({'success': True, 'position': position.to_dict()})

    # === Transform math ===

    @app.route('/transform/fit', methods=['POST'])
    def transform_fit():
        body = _json_body()
        fit = compute_fit(
            body.get('image_width'),
            body.get('image_height'),
            body.get('canvas_width'),
            body.get('canvas_height')
        )
        return jsonify({'success': True, 'fit': fit.to_dict()})

    @app.route('/transform/forward', methods=['POST'])
    def transform_forward():
        """Stored-space points -> viewport-space points"""
        body = _json_body()
        transform = _transform_from(body)
        mapped = transform.forward_points(_points(body))
        return jsonify({
            'success': True,
            'points': mapped.tolist(),
            'transform': transform.to_dict()
        })

    @app.route('/transform/inverse', methods=['POST'])
    def transform_inverse():
        """Viewport-space points -> stored-space points"""
        body = _json_body()
        transform = _transform_from(body)
        mapped = transform.inverse_points(_points(body))
        return jsonify({
            'success': True,
            'points': mapped.tolist(),
            'inside': [transform.contains_stored(x, y) for x, y in mapped.tolist()],
            'transform': transform.to_dict()
        })

    return app
