"""
Pixel format metadata and raw buffer access.

Maps the pixel formats handed over by the bitmap loading layer to the byte
offsets of their color channels, and wraps caller buffers in numpy views
after checking them against the layout.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np

from .errors import BufferLayoutError, UnsupportedPixelFormatError


class PixelFormat(Enum):
    """Pixel packings a decoded bitmap can arrive in"""

    CANONICAL = "Canonical"
    RGB24 = "Format24bppRgb"
    RGB32 = "Format32bppRgb"
    ARGB32 = "Format32bppArgb"
    PARGB32 = "Format32bppPArgb"

    # Recognised, but no channel operation supports them
    INDEXED8 = "Format8bppIndexed"
    GRAY16 = "Format16bppGrayScale"
    RGB16_565 = "Format16bppRgb565"
    RGB48 = "Format48bppRgb"
    ARGB64 = "Format64bppArgb"
    UNKNOWN = "Undefined"

    @property
    def bits_per_pixel(self) -> int:
        return BITS_PER_PIXEL[self]

    @classmethod
    def from_name(cls, name: Union[str, "PixelFormat"]) -> "PixelFormat":
        """
        Look up a pixel format by enum name, value or short alias.

        Matching is case-insensitive, so 'ARGB32', 'Format32bppArgb' and
        'Argb32' all resolve to PixelFormat.ARGB32.

        Raises:
            UnsupportedPixelFormatError: If the name matches no known format
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        for member in cls:
            if key in (member.name.lower(), member.value.lower()):
                return member
        alias = FORMAT_ALIASES.get(key)
        if alias is not None:
            return alias
        raise UnsupportedPixelFormatError(name)


BITS_PER_PIXEL = {
    PixelFormat.CANONICAL: 24,
    PixelFormat.RGB24: 24,
    PixelFormat.RGB32: 32,
    PixelFormat.ARGB32: 32,
    PixelFormat.PARGB32: 32,
    PixelFormat.INDEXED8: 8,
    PixelFormat.GRAY16: 16,
    PixelFormat.RGB16_565: 16,
    PixelFormat.RGB48: 48,
    PixelFormat.ARGB64: 64,
    PixelFormat.UNKNOWN: 0,
}

# Short spellings used in settings files
FORMAT_ALIASES = {
    'rgb': PixelFormat.RGB24,
    'rgbx': PixelFormat.RGB32,
    'argb': PixelFormat.ARGB32,
    'pargb': PixelFormat.PARGB32,
}


@dataclass(frozen=True)
class ChannelLayout:
    """Byte positions of the R, G and B channels inside one pixel"""
    pixel_size: int
    offsets: Tuple[int, int, int]

    def offset(self, channel: int) -> int:
        return self.offsets[channel]


# Formats without a leading byte keep R,G,B at 0,1,2; ARGB skips the alpha byte
CHANNEL_LAYOUTS = {
    PixelFormat.CANONICAL: ChannelLayout(pixel_size=3, offsets=(0, 1, 2)),
    PixelFormat.RGB24: ChannelLayout(pixel_size=3, offsets=(0, 1, 2)),
    PixelFormat.RGB32: ChannelLayout(pixel_size=4, offsets=(0, 1, 2)),
    PixelFormat.ARGB32: ChannelLayout(pixel_size=4, offsets=(1, 2, 3)),
    PixelFormat.PARGB32: ChannelLayout(pixel_size=4, offsets=(1, 2, 3)),
}


def resolve_channel_layout(pixel_format) -> ChannelLayout:
    """
    Get pixel size and channel offsets for a pixel format.

    Args:
        pixel_format: PixelFormat member or a name accepted by PixelFormat.from_name

    Returns:
        ChannelLayout for the format

    Raises:
        UnsupportedPixelFormatError: If the format has no channel layout
    """
    if isinstance(pixel_format, str):
        pixel_format = PixelFormat.from_name(pixel_format)
    try:
        return CHANNEL_LAYOUTS[pixel_format]
    except (KeyError, TypeError):
        raise UnsupportedPixelFormatError(pixel_format) from None


@dataclass(frozen=True)
class PixelLayout:
    """Shape of a raw pixel buffer as reported by the bitmap loader"""
    pixel_format: PixelFormat
    stride: int              # Bytes per row, row padding included
    height: int              # Number of rows
    width: Optional[int] = None  # Pixels per row; None means stride // pixel_size

    @property
    def byte_count(self) -> int:
        return self.stride * self.height

    def pixels_per_row(self, pixel_size: int) -> int:
        if self.width is not None:
            return self.width
        return self.stride // pixel_size

    @classmethod
    def for_array(cls, array: np.ndarray, pixel_format) -> "PixelLayout":
        """
        Build a layout describing a C-contiguous uint8 numpy array.

        Accepts (height, width, channels) pixel arrays and (height, stride)
        row arrays.
        """
        if array.ndim == 3:
            height, width, channels = array.shape
            if isinstance(pixel_format, PixelFormat) and pixel_format in CHANNEL_LAYOUTS:
                expected = CHANNEL_LAYOUTS[pixel_format].pixel_size
                if channels != expected:
                    raise BufferLayoutError(
                        f"{pixel_format.name} needs {expected} bytes per pixel, array has {channels}"
                    )
            return cls(pixel_format, stride=width * channels, height=height, width=width)
        if array.ndim == 2:
            height, stride = array.shape
            return cls(pixel_format, stride=stride, height=height)
        raise BufferLayoutError(f"Expected a 2D or 3D array, got shape {array.shape}")


def as_byte_array(buffer) -> np.ndarray:
    """
    Wrap a writable buffer in a flat uint8 numpy view without copying.

    Raises:
        TypeError: If the buffer is read-only, non-contiguous or not uint8
    """
    if isinstance(buffer, np.ndarray):
        if buffer.dtype != np.uint8:
            raise TypeError(f"Pixel arrays must be uint8, got {buffer.dtype}")
        if not buffer.flags.c_contiguous:
            raise TypeError("Pixel arrays must be C-contiguous")
        if not buffer.flags.writeable:
            raise TypeError("Pixel array is read-only")
        return buffer.reshape(-1)

    view = memoryview(buffer)
    if view.readonly:
        raise TypeError(f"Pixel buffer is read-only: {type(buffer).__name__}")
    return np.frombuffer(buffer, dtype=np.uint8)


def validate_buffer(buffer, layout: PixelLayout, pixel_size: int = 1) -> np.ndarray:
    """
    Check a buffer against its layout and return it as (height, stride) rows.

    Nothing is written to the buffer, so callers can run every check before
    touching a single byte.

    Args:
        buffer: bytearray, writable memoryview or uint8 numpy array
        layout: Layout reported for the buffer
        pixel_size: Bytes per pixel, used to check width against stride

    Raises:
        BufferLayoutError: If the layout is inconsistent with itself or the buffer
        TypeError: If the buffer cannot be written in place
    """
    if layout.height < 1:
        raise BufferLayoutError(f"Invalid height: {layout.height}")
    if layout.stride < 1:
        raise BufferLayoutError(f"Invalid stride: {layout.stride}")
    if layout.width is not None:
        if layout.width < 0:
            raise BufferLayoutError(f"Invalid width: {layout.width}")
        if layout.width * pixel_size > layout.stride:
            raise BufferLayoutError(
                f"Row of {layout.width} pixels ({layout.width * pixel_size} bytes) "
                f"does not fit stride {layout.stride}"
            )

    data = as_byte_array(buffer)
    if data.size != layout.byte_count:
        raise BufferLayoutError(
            f"Buffer holds {data.size} bytes, layout needs {layout.stride} x {layout.height} = {layout.byte_count}"
        )
    return data.reshape(layout.height, layout.stride)


def pixel_grid(rows: np.ndarray, layout: PixelLayout, channels: ChannelLayout) -> np.ndarray:
    """View (height, stride) rows as (height, width, pixel_size), skipping row padding"""
    width = layout.pixels_per_row(channels.pixel_size)
    used = width * channels.pixel_size
    return rows[:, :used].reshape(layout.height, width, channels.pixel_size)
