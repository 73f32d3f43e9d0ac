"""
In-place pixel operations applied to decoded textures before export.

Each operation is an immutable value object: build it once with its
parameters, then apply it to any number of buffers. Every check (channel
range at construction, pixel format and buffer layout at apply time) runs
before the first byte is written, so a failed call leaves the buffer intact.

No side effects beyond the buffer passed in: no printing, no file I/O, no logging.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .errors import ChannelRangeError
from .pixel_format import (
    PixelLayout,
    pixel_grid,
    resolve_channel_layout,
    validate_buffer,
)


CHANNEL_RED = 0
CHANNEL_GREEN = 1
CHANNEL_BLUE = 2

MAX_CHANNEL_VALUE = 255

NORMALIZE_TRUNCATE = "truncate"
NORMALIZE_RESCALE = "rescale"
NORMALIZE_MODES = (NORMALIZE_TRUNCATE, NORMALIZE_RESCALE)


def _check_channel(name: str, channel) -> int:
    # bool is an int subclass but never a meaningful channel
    if isinstance(channel, bool) or not isinstance(channel, (int, np.integer)):
        raise ChannelRangeError(name, channel)
    if channel < CHANNEL_RED or channel > CHANNEL_BLUE:
        raise ChannelRangeError(name, channel)
    return int(channel)


class TextureOperation(ABC):
    """Named transform that mutates a raw pixel buffer in place"""

    name: str

    @abstractmethod
    def apply(self, buffer, layout: PixelLayout) -> None:
        """
        Transform the pixels of buffer in place.

        Args:
            buffer: bytearray, writable memoryview or C-contiguous uint8 numpy array
                    holding exactly layout.stride * layout.height bytes
            layout: Pixel format, stride and height of the buffer
        """


@dataclass(frozen=True)
class ChannelInvert(TextureOperation):
    """Invert one color channel: value = 255 - value. Applying twice restores the buffer."""
    channel: int
    name: Optional[str] = None

    def __post_init__(self):
        """Validate the channel and fill in the default label"""
        object.__setattr__(self, 'channel', _check_channel('channel', self.channel))
        if self.name is None:
            object.__setattr__(self, 'name', f"i{self.channel}")

    def apply(self, buffer, layout: PixelLayout) -> None:
        channels = resolve_channel_layout(layout.pixel_format)
        rows = validate_buffer(buffer, layout, channels.pixel_size)

        pixels = pixel_grid(rows, layout, channels)
        target = pixels[..., channels.offset(self.channel)]
        np.subtract(MAX_CHANNEL_VALUE, target, out=target)


@dataclass(frozen=True)
class ChannelSwap(TextureOperation):
    """Exchange two color channels in every pixel. Swapping a channel with itself does nothing."""
    channel_a: int
    channel_b: int
    name: Optional[str] = None

    def __post_init__(self):
        """Validate both channels and fill in the default label"""
        object.__setattr__(self, 'channel_a', _check_channel('channel_a', self.channel_a))
        object.__setattr__(self, 'channel_b', _check_channel('channel_b', self.channel_b))
        if self.name is None:
            object.__setattr__(self, 'name', f"s{self.channel_a}{self.channel_b}")

    @property
    def channels(self):
        return self.channel_a, self.channel_b

    def apply(self, buffer, layout: PixelLayout) -> None:
        if self.channel_a == self.channel_b:
            return

        channels = resolve_channel_layout(layout.pixel_format)
        rows = validate_buffer(buffer, layout, channels.pixel_size)

        pixels = pixel_grid(rows, layout, channels)
        a = channels.offset(self.channel_a)
        b = channels.offset(self.channel_b)
        pixels[..., [a, b]] = pixels[..., [b, a]]


@dataclass(frozen=True)
class VerticalFlip(TextureOperation):
    """Mirror the image top to bottom by reversing row order. Works for any pixel format."""
    name: Optional[str] = None

    def __post_init__(self):
        if self.name is None:
            object.__setattr__(self, 'name', "fy")

    def apply(self, buffer, layout: PixelLayout) -> None:
        rows = validate_buffer(buffer, layout)

        top = 0
        bottom = layout.height - 1
        if top >= bottom:
            return

        scratch = np.empty(layout.stride, dtype=np.uint8)
        while top < bottom:
            scratch[:] = rows[bottom]
            rows[bottom] = rows[top]
            rows[top] = scratch
            top += 1
            bottom -= 1


@dataclass(frozen=True)
class VectorNormalize(TextureOperation):
    """
    Rescale each pixel's R,G,B to a unit-length vector, for normal maps.

    Modes:
        truncate: Treat raw byte values as vector components and write
                  trunc(component / length). Every result is 0 or 1, so
                  only axis-aligned pixels keep a non-zero channel. This is
                  the historical exporter behaviour.
        rescale:  Decode bytes to [-1, 1] (c / 255 * 2 - 1), normalize, and
                  encode back to [0, 255]. Output stays a usable normal map.

    Pixels whose vector has zero length are left unchanged in both modes.
    """
    name: Optional[str] = None
    mode: str = NORMALIZE_TRUNCATE

    def __post_init__(self):
        if self.mode not in NORMALIZE_MODES:
            raise ValueError(f"Unknown normalize mode: {self.mode!r} (expected one of {', '.join(NORMALIZE_MODES)})")
        if self.name is None:
            object.__setattr__(self, 'name', "N")

    def apply(self, buffer, layout: PixelLayout) -> None:
        channels = resolve_channel_layout(layout.pixel_format)
        rows = validate_buffer(buffer, layout, channels.pixel_size)

        pixels = pixel_grid(rows, layout, channels)
        offsets = list(channels.offsets)

        # Read all three components before any of them is rewritten
        rgb = pixels[..., offsets].astype(np.float64)

        if self.mode == NORMALIZE_TRUNCATE:
            vectors = rgb
        else:
            vectors = rgb / MAX_CHANNEL_VALUE * 2.0 - 1.0

        length = np.sqrt(np.sum(vectors * vectors, axis=-1, keepdims=True))
        valid = length[..., 0] > 0.0
        if not np.any(valid):
            return

        unit = np.divide(vectors, length, out=np.zeros_like(vectors), where=length > 0.0)

        if self.mode == NORMALIZE_TRUNCATE:
            encoded = np.trunc(unit)
        else:
            encoded = np.clip(np.rint((unit + 1.0) / 2.0 * MAX_CHANNEL_VALUE), 0, MAX_CHANNEL_VALUE)

        result = pixels[..., offsets]
        result[valid] = encoded[valid].astype(np.uint8)
        pixels[..., offsets] = result
