"""
Unit tests for floor-plan image loading.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from config import FLOOR_PLANS
from core.floor_plans.image_dimensions import (
    FloorPlanImageError, decode_image, fetch_image_bytes,
    image_dimensions_from_url, load_image_file, read_image_dimensions
)


def fake_response(content=b'', status_error=None):
    response = MagicMock()
    response.content = content
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    return response


class TestDecoding:
    """Bytes and files -> pixels."""

    def test_dimensions_from_png(self, plan_png_bytes):
        assert read_image_dimensions(plan_png_bytes) == (400, 300)

    def test_decode_returns_bgr(self, plan_png_bytes):
        image = decode_image(plan_png_bytes)
        assert image.shape == (300, 400, 3)

    @pytest.mark.parametrize('data', [b'', b'not an image', b'\x89PNG\r\n\x1a\n'])
    def test_bad_bytes(self, data):
        with pytest.raises(FloorPlanImageError):
            decode_image(data)

    def test_load_file(self, tmp_path, plan_png_bytes):
        path = tmp_path / 'plan.png'
        path.write_bytes(plan_png_bytes)
        assert load_image_file(path).shape[:2] == (300, 400)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FloorPlanImageError, match='not found'):
            load_image_file(tmp_path / 'nope.png')


class TestFetching:
    """URL -> bytes, with requests mocked."""

    @patch('core.floor_plans.image_dimensions.requests.get')
    def test_dimensions_from_url(self, mock_get, plan_png_bytes):
        mock_get.return_value = fake_response(plan_png_bytes)

        assert image_dimensions_from_url('https://cdn.example.com/plan.png') == (400, 300)
        mock_get.assert_called_once()
        assert mock_get.call_args.args[0] == 'https://cdn.example.com/plan.png'

    @patch('core.floor_plans.image_dimensions.requests.get')
    def test_http_error_wrapped(self, mock_get):
        mock_get.return_value = fake_response(status_error=requests.HTTPError('403 Forbidden'))

        with pytest.raises(FloorPlanImageError, match='403'):
            fetch_image_bytes('https://cdn.example.com/expired-signature.png')

    @patch('core.floor_plans.image_dimensions.requests.get')
    def test_network_error_wrapped(self, mock_get):
        mock_get.side_effect = requests.ConnectionError('connection refused')

        with pytest.raises(FloorPlanImageError) as exc_info:
            fetch_image_bytes('https://cdn.example.com/plan.png')
        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)

    @patch('core.floor_plans.image_dimensions.requests.get')
    def test_oversized_image(self, mock_get):
        mock_get.return_value = fake_response(b'\0' * (FLOOR_PLANS.MAX_UPLOAD_BYTES + 1))

        with pytest.raises(FloorPlanImageError, match='too large'):
            fetch_image_bytes('https://cdn.example.com/huge.png')

    @patch('core.floor_plans.image_dimensions.requests.get')
    def test_non_image_payload(self, mock_get):
        mock_get.return_value = fake_response(b'<html>login</html>')

        with pytest.raises(FloorPlanImageError):
            image_dimensions_from_url('https://cdn.example.com/plan.png')
