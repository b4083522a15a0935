"""
Integration tests for Flask API endpoints.

Runs the full request path (routing, validation, error mapping, store) against
a temporary floor-plan store. Image downloads are mocked.
"""

from unittest.mock import patch

import pytest

from api.routes import create_app
from api.state import PlannerState
from core.floor_plans.image_dimensions import FloorPlanImageError

TRANSFORM_BODY = {
    'image_width': 4000,
    'image_height': 3000,
    'canvas_width': 1200,
    'canvas_height': 800,
}


class TestAPIIntegration:
    """Integration tests for Flask API."""

    @pytest.fixture
    def app(self, repository):
        """Create Flask app for testing."""
        app = create_app(PlannerState(repository))
        app.config['TESTING'] = True
        return app

    @pytest.fixture
    def client(self, app):
        """Create test client."""
        return app.test_client()

    def create_plan(self, client, **overrides):
        body = {
            'name': 'Ground floor',
            'image_url': 'https://cdn.example.com/ground.png',
            'image_width': 4000,
            'image_height': 3000,
            'company_id': 'company-1',
        }
        body.update(overrides)
        return client.post('/floor-plans', json=body)

    # === Status ===

    def test_status_endpoint(self, client, floor_plan):
        response = client.get('/status')
        assert response.status_code == 200

        data = response.get_json()
        assert data['ready'] is True
        assert data['floor_plans'] == 1

    def test_status_before_initialize(self):
        client = create_app(PlannerState()).test_client()
        data = client.get('/status').get_json()
        assert data == {'ready': False, 'floor_plans': 0}

    # === Floor plans ===

    def test_create_and_get_floor_plan(self, client):
        response = self.create_plan(client)
        assert response.status_code == 201

        plan = response.get_json()['floor_plan']
        assert plan['image_width'] == 4000
        assert plan['file_kind'] == 'image'

        fetched = client.get(f"/floor-plans/{plan['id']}").get_json()['floor_plan']
        assert fetched == plan

    def test_create_fetches_missing_dimensions(self, client):
        with patch('api.routes.image_dimensions_from_url', return_value=(2480, 3508)) as mock_dims:
            response = self.create_plan(client, image_width=None, image_height=None)

        assert response.status_code == 201
        mock_dims.assert_called_once_with('https://cdn.example.com/ground.png')
        plan = response.get_json()['floor_plan']
        assert (plan['image_width'], plan['image_height']) == (2480, 3508)

    def test_create_with_unreachable_image(self, client):
        with patch('api.routes.image_dimensions_from_url',
                   side_effect=FloorPlanImageError('Failed to fetch floor-plan image: 403')):
            response = self.create_plan(client, image_width=None, image_height=None)

        assert response.status_code == 502
        assert response.get_json()['error'] == 'image_unavailable'

    def test_create_rejects_zero_dimensions(self, client):
        response = self.create_plan(client, image_width=0)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'invalid_image_dimensions'
        assert client.get('/floor-plans').get_json()['floor_plans'] == []

    @pytest.mark.parametrize('body', [
        {'image_url': 'x.png'},
        {'name': 'No image'},
        {'name': 'Bad kind', 'image_url': 'x.png', 'file_kind': 'docx'},
    ])
    def test_create_bad_payload(self, client, body):
        response = client.post('/floor-plans', json=body)
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_create_rejects_sub_pixel_width(self, client):
        response = self.create_plan(client, image_width=0.5)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'invalid_image_dimensions'

    @pytest.mark.parametrize('image_url', [
        'https://cdn.example.com/ground.docx',
        'https://cdn.example.com/floorplans/ground',
        'https://cdn.example.com/ground.pdf',
    ])
    def test_create_rejects_unsupported_image_type(self, client, image_url):
        response = self.create_plan(client, image_url=image_url)

        assert response.status_code == 400
        assert client.get('/floor-plans').get_json()['floor_plans'] == []

    def test_create_accepts_signed_url(self, client):
        response = self.create_plan(
            client, image_url='https://storage.example.com/plans/ground.PNG?token=abc.def&expires=3600'
        )
        assert response.status_code == 201

    def test_list_filters_by_company(self, client):
        self.create_plan(client, name='A')
        self.create_plan(client, name='B', company_id='company-2')

        all_names = [p['name'] for p in client.get('/floor-plans').get_json()['floor_plans']]
        company_names = [p['name'] for p in
                         client.get('/floor-plans?company_id=company-2').get_json()['floor_plans']]

        assert all_names == ['B', 'A']
        assert company_names == ['B']

    def test_unknown_floor_plan(self, client):
        response = client.get('/floor-plans/missing')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'unknown_floor_plan'

    def test_delete_floor_plan_cascades(self, client, floor_plan):
        client.put(f'/floor-plans/{floor_plan.id}/positions/eq-1', json={'x': 10, 'y': 10})

        response = client.delete(f'/floor-plans/{floor_plan.id}')

        assert response.get_json() == {'success': True, 'positions_removed': 1}
        assert client.get('/equipment/eq-1/position').status_code == 404

    # === Positions ===

    def test_save_and_read_position(self, client, floor_plan):
        response = client.put(f'/floor-plans/{floor_plan.id}/positions/eq-1',
                              json={'x': 2000.4, 'y': 1499.6})
        assert response.status_code == 200
        position = response.get_json()['position']
        assert (position['x'], position['y']) == (2000, 1500)

        listed = client.get(f'/floor-plans/{floor_plan.id}/positions').get_json()['positions']
        assert [p['equipment_id'] for p in listed] == ['eq-1']

        on_plan = client.get(f'/equipment/eq-1/position?floor_plan_id={floor_plan.id}').get_json()
        assert on_plan['position']['x'] == 2000

    def test_position_outside_plan_rejected(self, client, floor_plan):
        response = client.put(f'/floor-plans/{floor_plan.id}/positions/eq-1',
                              json={'x': 4001, 'y': 10})
        assert response.status_code == 400

    def test_position_needs_numbers(self, client, floor_plan):
        response = client.put(f'/floor-plans/{floor_plan.id}/positions/eq-1',
                              json={'x': 'left', 'y': 10})
        assert response.status_code == 400

    def test_position_on_unknown_plan(self, client):
        response = client.put('/floor-plans/missing/positions/eq-1', json={'x': 1, 'y': 1})
        assert response.status_code == 404

    def test_latest_position(self, client, floor_plan):
        other = self.create_plan(client, name='First floor').get_json()['floor_plan']
        client.put(f'/floor-plans/{floor_plan.id}/positions/eq-1', json={'x': 1, 'y': 1})
        client.put(f"/floor-plans/{other['id']}/positions/eq-1", json={'x': 2, 'y': 2})

        data = client.get('/equipment/eq-1/position').get_json()

        assert data['position']['floor_plan_id'] == other['id']

    def test_no_position(self, client):
        response = client.get('/equipment/eq-404/position')
        assert response.status_code == 404
        assert response.get_json()['error'] == 'no_position'

    # === Export ===

    def test_export_pdf(self, client, floor_plan, plan_image, tmp_path, monkeypatch):
        monkeypatch.setenv('FLOORPLAN_DATA_DIR', str(tmp_path / 'data'))
        client.put(f'/floor-plans/{floor_plan.id}/positions/eq-1', json={'x': 100, 'y': 100})

        with patch('api.routes.load_image_url', return_value=plan_image):
            response = client.get(f'/floor-plans/{floor_plan.id}/export')

        assert response.status_code == 200
        assert response.mimetype == 'application/pdf'
        assert response.data.startswith(b'%PDF')
        response.close()

    # === Transform math ===

    def test_fit(self, client):
        response = client.post('/transform/fit', json=TRANSFORM_BODY)
        fit = response.get_json()['fit']
        assert fit['scale'] == pytest.approx(800 / 3000)

    def test_inverse_canvas_center(self, client):
        response = client.post('/transform/inverse', json={**TRANSFORM_BODY, 'x': 600, 'y': 400})

        data = response.get_json()
        assert data['points'][0] == pytest.approx([2000, 1500])
        assert data['inside'] == [True]

    def test_forward_then_inverse(self, client):
        body = {**TRANSFORM_BODY, 'zoom': 2.5, 'pan_x': -300, 'pan_y': 40,
                'points': [[0, 0], [4000, 3000], [1234, 567]]}
        forward = client.post('/transform/forward', json=body).get_json()

        inverse = client.post('/transform/inverse',
                              json={**body, 'points': forward['points']}).get_json()

        for restored, original in zip(inverse['points'], body['points']):
            assert restored == pytest.approx(original)

    def test_zoom_clamped(self, client):
        data = client.post('/transform/forward', json={**TRANSFORM_BODY, 'zoom': 1000, 'x': 0, 'y': 0}).get_json()
        assert data['transform']['zoom'] == 20.0

    @pytest.mark.parametrize('overrides', [
        {'pan_x': 'inf'},
        {'pan_y': '-Infinity'},
        {'zoom': 'nan'},
        {'points': [['inf', 0]]},
    ])
    def test_non_finite_numbers_rejected(self, client, overrides):
        body = {**TRANSFORM_BODY, 'x': 0, 'y': 0, **overrides}

        response = client.post('/transform/forward', json=body)

        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_zero_canvas(self, client):
        response = client.post('/transform/inverse',
                               json={**TRANSFORM_BODY, 'canvas_width': 0, 'x': 1, 'y': 1})
        assert response.status_code == 409
        assert response.get_json()['error'] == 'zero_size_canvas'

    def test_invalid_image(self, client):
        response = client.post('/transform/fit', json={**TRANSFORM_BODY, 'image_height': 0})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'invalid_image_dimensions'

    def test_missing_points(self, client):
        response = client.post('/transform/forward', json=TRANSFORM_BODY)
        assert response.status_code == 400

    def test_non_json_body(self, client):
        response = client.post('/transform/fit', data='nope', content_type='text/plain')
        assert response.status_code == 400
