"""Configuration module for the floor-plan placement system"""

from .settings import (
    VIEWPORT,
    CANVAS,
    MARKERS,
    FLOOR_PLANS,
    SERVER,
    EXPORT,
    DEBUG
)

from .paths import (
    DATA_PATHS
)

__all__ = [
    'VIEWPORT',
    'CANVAS',
    'MARKERS',
    'FLOOR_PLANS',
    'SERVER',
    'EXPORT',
    'DEBUG',
    'DATA_PATHS'
]
