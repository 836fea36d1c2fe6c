"""
Bitmap Decoder - Windows BMP/DIB reader

Parses every standard DIB header variant and decodes uncompressed,
bit-field and RLE8 pixel data into a grid of packed ARGB values.
"""

__version__ = "0.1.0"

from bitmap_decoder.bitmap_image import BitmapImage
from bitmap_decoder.config import DEFAULT_CONFIG, DecoderConfig
from bitmap_decoder.dib_header import DIBHeader, HeaderType
from bitmap_decoder.errors import (
    BitmapError,
    CorruptedImage,
    DecodeError,
    MalformedMagicNumber,
    PaletteIndexOutOfRange,
    PaletteTruncated,
    TruncatedBuffer,
    TruncatedHeader,
    UnknownHeaderSize,
    UnsupportedBitDepth,
    UnsupportedCompression,
    UnsupportedForHeaderType,
)
from bitmap_decoder.picture import Picture
from bitmap_decoder.pixel_grid import PixelGrid

__all__ = [
    "BitmapImage",
    "DecoderConfig",
    "DEFAULT_CONFIG",
    "DIBHeader",
    "HeaderType",
    "PixelGrid",
    "Picture",
    "BitmapError",
    "CorruptedImage",
    "DecodeError",
    "MalformedMagicNumber",
    "PaletteIndexOutOfRange",
    "PaletteTruncated",
    "TruncatedBuffer",
    "TruncatedHeader",
    "UnknownHeaderSize",
    "UnsupportedBitDepth",
    "UnsupportedCompression",
    "UnsupportedForHeaderType",
    "__version__",
]
