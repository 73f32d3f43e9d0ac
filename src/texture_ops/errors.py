"""Exceptions raised by texture operations"""


class TextureOperationError(Exception):
    """Base class for all texture operation failures"""


class ChannelRangeError(TextureOperationError, ValueError):
    """Channel index outside R/G/B (0, 1, 2)"""

    def __init__(self, name: str, value):
        self.name = name
        self.value = value
        super().__init__(f"{name} must be 0 (R), 1 (G) or 2 (B), got {value!r}")


class UnsupportedPixelFormatError(TextureOperationError, ValueError):
    """Pixel format has no known channel layout"""

    def __init__(self, pixel_format):
        self.pixel_format = pixel_format
        super().__init__(f"Pixel format not supported: {pixel_format}")


class BufferLayoutError(TextureOperationError, ValueError):
    """Buffer size or layout metadata is inconsistent"""
