"""API module for Flask routes and state management"""

from .state import PlannerState
from .routes import create_app

__all__ = ['PlannerState', 'create_app']
