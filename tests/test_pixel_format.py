"""Tests for pixel format resolution and buffer validation"""

import numpy as np
import pytest

from texture_ops import (
    BufferLayoutError,
    ChannelLayout,
    PixelFormat,
    PixelLayout,
    UnsupportedPixelFormatError,
    resolve_channel_layout,
    validate_buffer,
)


class TestResolveChannelLayout:
    """Tests for the pixel format -> channel offset table"""

    @pytest.mark.parametrize("pixel_format", [PixelFormat.CANONICAL, PixelFormat.RGB24])
    def test_three_byte_formats(self, pixel_format):
        """24-bit RGB and canonical share 3-byte pixels with R,G,B at 0,1,2"""
        assert resolve_channel_layout(pixel_format) == ChannelLayout(3, (0, 1, 2))

    def test_rgb32_keeps_offsets(self):
        """32-bit RGB has 4-byte pixels but no leading byte"""
        assert resolve_channel_layout(PixelFormat.RGB32) == ChannelLayout(4, (0, 1, 2))

    @pytest.mark.parametrize("pixel_format", [PixelFormat.ARGB32, PixelFormat.PARGB32])
    def test_argb_skips_alpha(self, pixel_format):
        """ARGB formats shift every channel past the alpha byte"""
        assert resolve_channel_layout(pixel_format) == ChannelLayout(4, (1, 2, 3))

    @pytest.mark.parametrize("pixel_format", [
        PixelFormat.INDEXED8, PixelFormat.GRAY16, PixelFormat.RGB16_565,
        PixelFormat.RGB48, PixelFormat.ARGB64, PixelFormat.UNKNOWN,
    ])
    def test_unsupported_formats_raise(self, pixel_format):
        """Formats without a channel layout are rejected"""
        with pytest.raises(UnsupportedPixelFormatError):
            resolve_channel_layout(pixel_format)

    def test_non_format_value_raises(self):
        """Arbitrary values are rejected the same way"""
        with pytest.raises(UnsupportedPixelFormatError):
            resolve_channel_layout(42)

    def test_accepts_names(self):
        """String names resolve through PixelFormat.from_name"""
        assert resolve_channel_layout("Format32bppArgb").offsets == (1, 2, 3)


class TestPixelFormatFromName:
    """Tests for looking up formats by name"""

    @pytest.mark.parametrize("name,expected", [
        ("RGB24", PixelFormat.RGB24),
        ("Rgb24", PixelFormat.RGB24),
        ("Format24bppRgb", PixelFormat.RGB24),
        ("PArgb32", PixelFormat.PARGB32),
        ("canonical", PixelFormat.CANONICAL),
        ("argb", PixelFormat.ARGB32),
    ])
    def test_known_names(self, name, expected):
        """Enum names, values and aliases all resolve, case-insensitively"""
        assert PixelFormat.from_name(name) is expected

    def test_member_passthrough(self):
        """A PixelFormat member is returned unchanged"""
        assert PixelFormat.from_name(PixelFormat.RGB32) is PixelFormat.RGB32

    def test_unknown_name_raises(self):
        """Unknown names are reported as unsupported formats"""
        with pytest.raises(UnsupportedPixelFormatError):
            PixelFormat.from_name("YUV420")

    def test_bits_per_pixel(self):
        """Every member reports its bit depth"""
        assert PixelFormat.RGB24.bits_per_pixel == 24
        assert PixelFormat.ARGB32.bits_per_pixel == 32
        assert PixelFormat.ARGB64.bits_per_pixel == 64


class TestValidateBuffer:
    """Tests for the buffer/layout precondition checks"""

    def test_returns_row_view(self):
        """Rows view shares memory with the caller's buffer"""
        buffer = bytearray(range(12))
        rows = validate_buffer(buffer, PixelLayout(PixelFormat.RGB24, stride=6, height=2), 3)
        assert rows.shape == (2, 6)
        rows[1, 0] = 99
        assert buffer[6] == 99

    def test_accepts_numpy_array(self):
        """uint8 arrays are viewed without copying"""
        array = np.zeros((2, 2, 3), dtype=np.uint8)
        rows = validate_buffer(array, PixelLayout.for_array(array, PixelFormat.RGB24), 3)
        rows[0, 0] = 7
        assert array[0, 0, 0] == 7

    def test_accepts_memoryview(self):
        """Writable memoryviews are accepted"""
        buffer = bytearray(6)
        rows = validate_buffer(memoryview(buffer), PixelLayout(PixelFormat.RGB24, stride=3, height=2), 3)
        rows[1, 2] = 5
        assert buffer[5] == 5

    def test_length_mismatch_raises(self):
        """Buffer length must equal stride * height"""
        with pytest.raises(BufferLayoutError):
            validate_buffer(bytearray(10), PixelLayout(PixelFormat.RGB24, stride=6, height=2), 3)

    @pytest.mark.parametrize("stride,height", [(6, 0), (6, -1), (0, 2)])
    def test_invalid_dimensions_raise(self, stride, height):
        """Zero or negative height/stride is rejected"""
        with pytest.raises(BufferLayoutError):
            validate_buffer(bytearray(12), PixelLayout(PixelFormat.RGB24, stride=stride, height=height), 3)

    def test_width_wider_than_stride_raises(self):
        """A row of width pixels must fit inside the stride"""
        with pytest.raises(BufferLayoutError):
            validate_buffer(bytearray(12), PixelLayout(PixelFormat.RGB24, stride=6, height=2, width=3), 3)

    def test_read_only_bytes_raise(self):
        """Immutable bytes cannot be transformed in place"""
        with pytest.raises(TypeError):
            validate_buffer(bytes(12), PixelLayout(PixelFormat.RGB24, stride=6, height=2), 3)

    def test_wrong_dtype_raises(self):
        """Only uint8 arrays hold raw pixel bytes"""
        with pytest.raises(TypeError):
            validate_buffer(np.zeros(12, dtype=np.float32), PixelLayout(PixelFormat.RGB24, stride=6, height=2), 3)


class TestPixelLayoutForArray:
    """Tests for deriving a layout from a numpy array"""

    def test_pixel_array(self):
        """(height, width, channels) arrays give a padding-free layout"""
        layout = PixelLayout.for_array(np.zeros((4, 5, 4), dtype=np.uint8), PixelFormat.ARGB32)
        assert layout == PixelLayout(PixelFormat.ARGB32, stride=20, height=4, width=5)

    def test_row_array(self):
        """(height, stride) arrays keep the stride as given"""
        layout = PixelLayout.for_array(np.zeros((3, 16), dtype=np.uint8), PixelFormat.RGB24)
        assert layout.stride == 16
        assert layout.height == 3
        assert layout.width is None

    def test_channel_count_mismatch_raises(self):
        """A 3-channel array cannot be described as ARGB"""
        with pytest.raises(BufferLayoutError):
            PixelLayout.for_array(np.zeros((2, 2, 3), dtype=np.uint8), PixelFormat.ARGB32)

    def test_flat_array_raises(self):
        """1D arrays carry no row information"""
        with pytest.raises(BufferLayoutError):
            PixelLayout.for_array(np.zeros(12, dtype=np.uint8), PixelFormat.RGB24)
