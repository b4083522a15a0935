"""Recoverable failures raised by the viewport math"""


class ViewportError(Exception):
    """Base class for viewport computation failures"""


class InvalidImageDimensions(ViewportError, ValueError):
    """Floor-plan width/height is missing, non-finite, zero or negative"""

    def __init__(self, width, height):
        self.width = width
        self.height = height
        super().__init__(f"Invalid image dimensions: {width}x{height}")


class ZeroSizeCanvas(ViewportError):
    """Canvas has no usable size yet (layout not done); retry after layout"""

    def __init__(self, width, height):
        self.width = width
        self.height = height
        super().__init__(f"Canvas not laid out yet: {width}x{height}")
