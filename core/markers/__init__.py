"""Equipment marker layout and hit-testing"""

from .marker_layout import layout_markers, hit_test

__all__ = ['layout_markers', 'hit_test']
