#!/usr/bin/env python3
"""
Floor-Plan Placement - API server
Floor plans, equipment positions and canvas transform math over HTTP
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from config import SERVER, DATA_PATHS
from core.floor_plans import FloorPlanRepository
from api import PlannerState, create_app


def initialize_system():
    """Initialize the floor-plan store"""
    print("Floor-Plan Placement - Initializing...")

    try:
        DATA_PATHS.ensure_data_dir_exists()
        print(f"Data directory: {DATA_PATHS.DATA_DIR}")

        repository = FloorPlanRepository(DATA_PATHS.store_path())
        state = PlannerState(repository)

        print(f"Floor plans loaded: {len(repository.list_floor_plans())}")
        return state

    except OSError as e:
        print(f"\nInitialization failed: {e}")
        return None


def main():
    state = initialize_system()
    if state is None:
        print("\nFailed to initialize system. Exiting.")
        sys.exit(1)

    app = create_app(state)

    print(f"Server starting on http://{SERVER.HOST}:{SERVER.PORT}")
    print("Press Ctrl+C to stop\n")

    # Quiet per-request logging
    import logging
    log = logging.getLogger('werkzeug')
    log.setLevel(logging.ERROR)

    app.run(host=SERVER.HOST, port=SERVER.PORT, debug=SERVER.DEBUG)


if __name__ == '__main__':
    main()
