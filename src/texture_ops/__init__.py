"""In-place pixel buffer operations for preparing textures (notably normal maps) for export"""

from .errors import (
    TextureOperationError,
    ChannelRangeError,
    UnsupportedPixelFormatError,
    BufferLayoutError,
)
from .pixel_format import (
    PixelFormat,
    PixelLayout,
    ChannelLayout,
    resolve_channel_layout,
    validate_buffer,
)
from .operations import (
    TextureOperation,
    ChannelInvert,
    ChannelSwap,
    VerticalFlip,
    VectorNormalize,
    CHANNEL_RED,
    CHANNEL_GREEN,
    CHANNEL_BLUE,
    NORMALIZE_TRUNCATE,
    NORMALIZE_RESCALE,
)
from .normal_settings import NormalMapSettings
from .pipeline import TexturePipeline, PipelineResult

__version__ = "1.0.0"

__all__ = [
    # Errors
    'TextureOperationError',
    'ChannelRangeError',
    'UnsupportedPixelFormatError',
    'BufferLayoutError',
    # Pixel layout
    'PixelFormat',
    'PixelLayout',
    'ChannelLayout',
    'resolve_channel_layout',
    'validate_buffer',
    # Operations
    'TextureOperation',
    'ChannelInvert',
    'ChannelSwap',
    'VerticalFlip',
    'VectorNormalize',
    'CHANNEL_RED',
    'CHANNEL_GREEN',
    'CHANNEL_BLUE',
    'NORMALIZE_TRUNCATE',
    'NORMALIZE_RESCALE',
    # Settings and pipeline
    'NormalMapSettings',
    'TexturePipeline',
    'PipelineResult',
]
