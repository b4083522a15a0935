"""
Configuration settings for the floor-plan equipment placement system
"""

from dataclasses import dataclass
from typing import Tuple

# Global debug flag - set to True to enable verbose logging
DEBUG = False


@dataclass(frozen=True)
class ViewportConfig:
    """Zoom/pan limits for the floor-plan canvas"""
    MIN_ZOOM: float = 0.01
    MAX_ZOOM: float = 20.0

    # Wheel zoom: zoom *= WHEEL_ZOOM_BASE ** delta_y (delta_y > 0 zooms out)
    WHEEL_ZOOM_BASE: float = 0.999

    # Zoom in/out buttons multiply/divide by this factor
    ZOOM_STEP: float = 1.1

    # Qt button names that start a pan without a modifier
    PAN_BUTTONS: Tuple[str, ...] = ('middle',)
    PAN_MODIFIER: str = 'ctrl'


@dataclass(frozen=True)
class CanvasConfig:
    """Drawing surface defaults"""
    DEFAULT_WIDTH: int = 1000
    DEFAULT_HEIGHT: int = 700
    BACKGROUND: str = '#ffffff'


@dataclass(frozen=True)
class MarkerConfig:
    """Equipment marker appearance and hit-testing"""
    RADIUS: int = 15
    HIT_SLOP: int = 4
    FILL: str = '#ef4444'
    PENDING_FILL: str = '#f59e0b'
    STROKE: str = '#ffffff'
    STROKE_WIDTH: int = 2
    LABEL_OFFSET_X: int = 20
    LABEL_COLOR: str = '#1f2937'


@dataclass(frozen=True)
class FloorPlanConfig:
    """Floor-plan upload and image fetching"""
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    ALLOWED_EXTENSIONS: Tuple[str, ...] = ('.png', '.jpg', '.jpeg', '.webp', '.bmp')
    IMAGE_FETCH_TIMEOUT_SECONDS: int = 15


@dataclass(frozen=True)
class ServerConfig:
    """Flask server configuration"""
    HOST: str = '127.0.0.1'
    PORT: int = 5050
    DEBUG: bool = False
    CORS_ENABLED: bool = True


@dataclass(frozen=True)
class ExportConfig:
    """Annotated floor-plan PDF export"""
    PAGE_SIZE: str = 'A4'
    MARGIN_MM: float = 10.0
    TITLE: str = 'Equipment list'
    TITLE_FONT_SIZE: int = 16
    LIST_FONT_SIZE: int = 12
    LIST_LINE_SPACING: int = 18

    # Marker size on the exported image, relative to the image's long side
    MARKER_RADIUS_RATIO: float = 0.006
    MIN_MARKER_RADIUS: int = 6

    # BGR colors for OpenCV drawing
    MARKER_BGR: Tuple[int, int, int] = (68, 68, 239)
    OUTLINE_BGR: Tuple[int, int, int] = (255, 255, 255)
    LABEL_BGR: Tuple[int, int, int] = (55, 41, 31)
    LABEL_BACKGROUND_BGR: Tuple[int, int, int] = (255, 255, 255)


# Create singleton instances
VIEWPORT = ViewportConfig()
CANVAS = CanvasConfig()
MARKERS = MarkerConfig()
FLOOR_PLANS = FloorPlanConfig()
SERVER = ServerConfig()
EXPORT = ExportConfig()
