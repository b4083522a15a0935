"""Data directory and file paths configuration"""

import os
import sys
from pathlib import Path


class DataPaths:
    """Data directory and store file paths"""

    # Environment override for the data directory (tests, containers)
    DATA_DIR_ENV = 'FLOORPLAN_DATA_DIR'

    # Store files
    STORE_FILE = 'floor_plans.json'
    EXPORTS_SUBDIR = 'exports'

    @classmethod
    def _get_data_dir(cls):
        """Get the data directory path, checking the environment override first"""
        override = os.getenv(cls.DATA_DIR_ENV)
        if override:
            return Path(override)

        if sys.platform == 'win32':
            base = os.getenv('APPDATA')
        elif sys.platform == 'darwin':
            base = os.path.expanduser('~/Library/Application Support')
        else:
            base = os.getenv('XDG_DATA_HOME') or os.path.expanduser('~/.local/share')

        if base:
            return Path(base) / 'FloorPlan-Placement'

        # Fallback to relative path for development
        return Path('data')

    @property
    def DATA_DIR(self):
        return self._get_data_dir()

    @property
    def EXPORTS_DIR(self):
        return self.DATA_DIR / self.EXPORTS_SUBDIR

    def ensure_data_dir_exists(self):
        """Create all necessary directories"""
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)
        self.EXPORTS_DIR.mkdir(parents=True, exist_ok=True)

    def store_path(self):
        """Full path to the floor-plan/position store"""
        return self.DATA_DIR / self.STORE_FILE

    def export_path(self, floor_plan_id: str, suffix: str = '.pdf'):
        """Full path for an exported annotated floor plan"""
        return self.EXPORTS_DIR / f"floor_plan_{floor_plan_id}{suffix}"


# Create singleton instance
DATA_PATHS = DataPaths()
