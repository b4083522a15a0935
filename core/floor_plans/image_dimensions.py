"""
Floor-plan image loading - native dimensions from bytes, files or URLs
"""

from pathlib import Path
from typing import Tuple, Union

import cv2
import numpy as np
import requests

from config import FLOOR_PLANS, DEBUG


class FloorPlanImageError(RuntimeError):
    """Floor-plan image could not be fetched or decoded"""


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes (PNG, JPEG, WebP, BMP) to a BGR array.

    Raises:
        FloorPlanImageError: If the bytes are empty or not a supported image
    """
    if not data:
        raise FloorPlanImageError("Empty image data")

    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None:
        raise FloorPlanImageError("Could not decode floor-plan image")
    return image


def image_size(image: np.ndarray) -> Tuple[int, int]:
    """(width, height) of a decoded image"""
    h, w = image.shape[:2]
    return int(w), int(h)


def read_image_dimensions(data: bytes) -> Tuple[int, int]:
    """Native (width, height) of encoded image bytes"""
    return image_size(decode_image(data))


def load_image_file(path: Union[str, Path]) -> np.ndarray:
    """
    Load a floor-plan image from disk.

    Raises:
        FloorPlanImageError: If the file is missing or not an image
    """
    path = Path(path)
    if not path.exists():
        raise FloorPlanImageError(f"Floor-plan image not found: {path}")

    # imdecode instead of imread so non-ASCII paths work on Windows
    return decode_image(path.read_bytes())


def fetch_image_bytes(url: str, timeout: int = FLOOR_PLANS.IMAGE_FETCH_TIMEOUT_SECONDS) -> bytes:
    """
    Download a floor-plan image (public or signed URL).

    Raises:
        FloorPlanImageError: On network errors, HTTP errors or oversized files
    """
    if DEBUG:
        print(f"[FloorPlanImage] Fetching {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise FloorPlanImageError(f"Failed to fetch floor-plan image: {e}") from e

    data = response.content
    if len(data) > FLOOR_PLANS.MAX_UPLOAD_BYTES:
        raise FloorPlanImageError(
            f"Floor-plan image too large: {len(data) / 1024 / 1024:.1f} MB "
            f"(limit {FLOOR_PLANS.MAX_UPLOAD_BYTES / 1024 / 1024:.0f} MB)"
        )
    return data


def load_image_url(url: str) -> np.ndarray:
    """Fetch and decode a floor-plan image"""
    return decode_image(fetch_image_bytes(url))


def image_dimensions_from_url(url: str) -> Tuple[int, int]:
    """Native (width, height) of the image behind a URL"""
    width, height = read_image_dimensions(fetch_image_bytes(url))
    print(f"[FloorPlanImage] {url} -> {width}x{height}")
    return width, height
