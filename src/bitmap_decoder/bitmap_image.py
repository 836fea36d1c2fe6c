"""
BitmapImage - the public entry point for reading a BMP file.

Owns the raw bytes, the parsed headers and the palette, and exposes header
queries plus ``decode()``. Everything is parsed once at construction; the
pixel grid is computed on first ``decode()`` and cached.
"""

from pathlib import Path
from typing import Optional, Union
import logging

from . import constants as c
from .config import DEFAULT_CONFIG, DecoderConfig
from .dib_header import DIBHeader, HeaderType, create_dib_header
from .errors import DecodeError, TruncatedHeader
from .file_header import FileHeader, ImageType
from .palette import ColourPalette, palette_start
from .pixel_decoder import PixelDecoder
from .pixel_grid import PixelGrid

logger = logging.getLogger(__name__)

_ALPHA_MASK_HEADERS = (
    HeaderType.BITMAPV3INFOHEADER,
    HeaderType.BITMAPV4HEADER,
    HeaderType.BITMAPV5HEADER,
)


class BitmapImage:
    """
    A parsed BMP image.

    Example:
        image = BitmapImage.from_path("logo.bmp")
        print(image.width, image.height, image.bits_per_pixel)
        grid = image.decode()
        top_left = grid.pixel(0, 0)

    Raises (at construction):
        TruncatedHeader: Buffer too short for a BMP, or for its DIB header
        MalformedMagicNumber: Missing 'BM' signature
        UnknownHeaderSize: Unrecognised DIB header size
        PaletteTruncated: Colour table runs past the buffer
    """

    def __init__(self, data: bytes, config: Optional[DecoderConfig] = None):
        if data is None:
            raise TypeError("Input bytes cannot be None.")
        if len(data) < c.MIN_BMP_SIZE:
            raise TruncatedHeader("Byte array too short to be a minimal BMP image.")

        self._data = bytes(data)
        self.config = config or DEFAULT_CONFIG
        self.file_header = FileHeader.from_bytes(self._data)
        self.header: DIBHeader = create_dib_header(self._data)

        self.palette: Optional[ColourPalette] = None
        if self.has_colour_palette:
            self.palette = ColourPalette.from_bytes(
                self._data, self.header, palette_start(self.header)
            )

        self._decoder = PixelDecoder(
            self._data, self.file_header, self.header, self.palette, self.config
        )
        self._grid: Optional[PixelGrid] = None

    @classmethod
    def from_path(
        cls,
        path: Union[str, Path],
        config: Optional[DecoderConfig] = None,
    ) -> "BitmapImage":
        """Read the whole file at ``path`` and parse it."""
        data = Path(path).read_bytes()
        logger.debug(f"Read {len(data)} bytes from {path}")
        return cls(data, config)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        config: Optional[DecoderConfig] = None,
    ) -> "BitmapImage":
        return cls(data, config)

    def __repr__(self) -> str:
        return (
            f"BitmapImage({self.width}x{self.height}, {self.bits_per_pixel} bpp, "
            f"{self.header_type.name}, {c.compression_name(self.compression)})"
        )

    # File header
    @property
    def image_type(self) -> ImageType:
        return self.file_header.image_type

    @property
    def size(self) -> int:
        """Total file size declared in the file header."""
        return self.file_header.file_size

    @property
    def offset(self) -> int:
        """Pixel-data offset as declared in the file header."""
        return self.file_header.pixel_data_offset

    @property
    def data_offset(self) -> int:
        """Pixel-data offset actually used for decoding."""
        return self._decoder.data_offset

    # DIB header
    @property
    def header_type(self) -> HeaderType:
        return self.header.header_type

    @property
    def header_size(self) -> int:
        return self.header.header_size

    @property
    def width(self) -> int:
        return self.header.width

    @property
    def height(self) -> int:
        """Image height in pixels (always non-negative)."""
        return self.header.abs_height

    @property
    def signed_height(self) -> int:
        """Height as stored; negative for top-down images."""
        return self.header.height

    @property
    def colour_planes(self) -> int:
        return self.header.colour_planes

    @property
    def bits_per_pixel(self) -> int:
        return self.header.bits_per_pixel

    @property
    def compression(self) -> int:
        return self.header.compression

    @property
    def image_data_size(self) -> int:
        return self.header.image_data_size

    @property
    def n_colours(self) -> int:
        return self.header.n_colours

    @property
    def important_colours(self) -> int:
        return self.header.important_colours

    @property
    def x_resolution(self) -> int:
        """Horizontal resolution in pixels per metre."""
        return self.header.x_resolution

    @property
    def y_resolution(self) -> int:
        """Vertical resolution in pixels per metre."""
        return self.header.y_resolution

    @property
    def has_colour_palette(self) -> bool:
        return self.header.bits_per_pixel <= 8

    def alpha_mask(self) -> int:
        """
        Alpha mask of a V3, V4 or V5 header.

        Raises:
            UnsupportedForHeaderType: For core, info and V2 headers
        """
        return self.header.require("alpha_mask")

    def profile_size(self) -> int:
        """
        ICC profile size of a V5 header.

        Raises:
            UnsupportedForHeaderType: For any header older than V5
        """
        return self.header.require("profile_size")

    def has_alpha_channel(self) -> bool:
        """
        Whether the image carries transparency information.

        Answered by the palette when there is one, then by the alpha mask of
        V3/V4/V5 headers, and finally (if enabled) by decoding the image and
        looking for a non-opaque pixel. A pixel stream that cannot be decoded
        answers False.
        """
        if self.palette is not None:
            return self.palette.has_alpha_channel

        if self.header_type in _ALPHA_MASK_HEADERS:
            return self.header.alpha_mask != 0

        if not self.config.alpha_scan_fallback:
            return False

        try:
            grid = self._decoded()
        except DecodeError as e:
            logger.debug(f"Alpha scan skipped: {e}")
            return False

        for row in grid:
            for argb in row:
                if (argb >> 24) & 0xFF != c.OPAQUE_ALPHA:
                    return True
        return False

    def _decoded(self) -> PixelGrid:
        if self._grid is not None:
            return self._grid
        grid = self._decoder.decode()
        if self.config.memoize:
            self._grid = grid
        return grid

    def decode(self) -> PixelGrid:
        """
        Decode the pixel data into a height x width ARGB grid.

        The returned grid is a private copy; mutating it does not affect
        later calls.
        """
        return self._decoded().copy()

    def raw_bytes(self) -> bytearray:
        """Mutable copy of the input buffer."""
        return bytearray(self._data)
