"""
Pixel reconstruction engine.

Turns the stored pixel data of a BMP into a ``PixelGrid`` of 0xAARRGGBB
values with row 0 at the top of the displayed image. The path is chosen by
the header's compression code and bit depth:

    BI_RGB 1/4/8 bpp           palette lookup of packed indices
    BI_RGB 16/24/32 bpp        RGB555, BGR, BGRA direct colour
    BI_BITFIELDS / ALPHA...    masked 16/32 bpp values
    BI_RLE8                    run-length state machine (see rle8.py)

BI_RLE4 and embedded JPEG/PNG payloads are reported as unsupported.
"""

from typing import List, Optional
import logging
import struct

from . import constants as c
from .bitfields import ChannelMasks, extract_component, resolve_masks
from .byte_reader import ensure_available
from .config import DEFAULT_CONFIG, DecoderConfig
from .dib_header import DIBHeader, scanline_bytes
from .errors import (
    CorruptedImage,
    PaletteIndexOutOfRange,
    UnsupportedBitDepth,
    UnsupportedCompression,
)
from .file_header import FileHeader
from .palette import (
    ColourPalette,
    bitfield_block_size,
    pack_argb,
    palette_byte_size,
    palette_entry_width,
)
from .pixel_grid import PixelGrid, RowMapping, blank_rows
from .rle8 import Rle8Decoder

logger = logging.getLogger(__name__)

Rows = List[List[int]]


class PixelDecoder:
    """
    Decode the pixel data of one parsed BMP.

    Args:
        data: The whole BMP file
        file_header: Parsed BITMAPFILEHEADER
        dib_header: Parsed DIB header
        palette: Colour table, required for 1/4/8 bpp and RLE8 images
        config: Decoder options (defaults to DEFAULT_CONFIG)
    """

    def __init__(
        self,
        data: bytes,
        file_header: FileHeader,
        dib_header: DIBHeader,
        palette: Optional[ColourPalette] = None,
        config: Optional[DecoderConfig] = None,
    ):
        self.data = data
        self.file_header = file_header
        self.header = dib_header
        self.palette = palette
        self.config = config or DEFAULT_CONFIG

    @property
    def width(self) -> int:
        return self.header.width

    @property
    def height(self) -> int:
        """Display height; a zero height is decoded as a single row."""
        return self.header.abs_height or 1

    @property
    def stride(self) -> int:
        return scanline_bytes(self.width, self.header.bits_per_pixel)

    @property
    def row_bytes(self) -> int:
        """Bytes of pixel data in a stored row, excluding padding."""
        return (self.width * self.header.bits_per_pixel + 7) // 8

    @property
    def offset_recomputed(self) -> bool:
        return not self.file_header.offset_is_usable(len(self.data))

    @property
    def data_offset(self) -> int:
        """
        File offset of the first stored pixel row.

        If the declared offset is zero or points past the buffer it is
        rebuilt as file header + DIB header + mask block + palette.
        """
        if not self.offset_recomputed:
            return self.file_header.pixel_data_offset

        if self.palette is not None:
            palette_size = len(self.palette) * palette_entry_width(self.header)
        else:
            palette_size = palette_byte_size(self.header)
        return (
            c.FILE_HEADER_SIZE
            + self.header.header_size
            + bitfield_block_size(self.header)
            + palette_size
        )

    def decode(self) -> PixelGrid:
        """
        Reconstruct the full pixel grid.

        Compression and bit depth are validated, and for uncompressed and
        bitfield images the stored rows are checked against the buffer,
        before the grid is allocated.

        Returns:
            PixelGrid of size height x width. Only an RLE8 image can come back
            with ``complete == False``.

        Raises:
            UnsupportedCompression: BI_RLE4, BI_JPEG, BI_PNG or an unknown code
            UnsupportedBitDepth: Bit depth invalid for the compression
            PaletteIndexOutOfRange: A pixel indexes past the palette
            CorruptedImage: Pixel data for a non-RLE image is cut off
        """
        compression = self.header.compression
        bpp = self.header.bits_per_pixel
        mapping = RowMapping.for_height(self.header.height)
        diagnostics: List[str] = []
        complete = True

        if self.offset_recomputed:
            message = (
                f"Pixel data offset {self.file_header.pixel_data_offset} is invalid; "
                f"using {self.data_offset} computed from header geometry."
            )
            logger.warning(message)
            diagnostics.append(message)

        if compression == c.Compression.BI_RGB:
            if bpp not in c.INDEXED_BIT_DEPTHS + c.DIRECT_BIT_DEPTHS:
                raise UnsupportedBitDepth(bpp, f"Unsupported bits per pixel for BI_RGB: {bpp}")
            reader = self._read_uncompressed
        elif compression == c.Compression.BI_RLE8:
            reader = None
        elif compression in (c.Compression.BI_BITFIELDS, c.Compression.BI_ALPHABITFIELDS):
            if bpp not in c.BITFIELD_BIT_DEPTHS:
                raise UnsupportedBitDepth(
                    bpp, "BI_BITFIELDS compression is only valid for 16 or 32 bits per pixel."
                )
            reader = self._read_bitfields
        elif compression == c.Compression.BI_RLE4:
            raise UnsupportedCompression(
                compression,
                "Run-Length Encoded for 4bpp (BI_RLE4) compression is not supported.",
            )
        elif compression in (c.Compression.BI_JPEG, c.Compression.BI_PNG):
            raise UnsupportedCompression(
                compression,
                "JPEG or PNG embedded compression is not supported for direct pixel reading.",
            )
        else:
            raise UnsupportedCompression(compression)

        if reader is None:
            rle = self._rle8_decoder(mapping)
            rows = rle.run(blank_rows(self.width, self.height))
            complete = rle.complete
            if rle.error:
                diagnostics.append(rle.error)
        else:
            # The last stored row bounds the whole pixel array.
            self._scanline(self.height - 1, self.row_bytes)
            rows = reader(blank_rows(self.width, self.height), mapping)

        return PixelGrid(
            width=self.width,
            height=self.height,
            rows=rows,
            complete=complete,
            diagnostics=diagnostics,
        )

    def _require_palette(self) -> ColourPalette:
        if self.palette is None:
            raise CorruptedImage(
                f"{self.header.bits_per_pixel} bpp image has no colour palette"
            )
        return self.palette

    def _scanline(self, file_row: int, needed: int) -> int:
        """File offset of a stored row, checking that ``needed`` bytes exist."""
        start = self.data_offset + file_row * self.stride
        ensure_available(
            self.data,
            start,
            needed,
            f"Pixel data out of bounds for {self.header.bits_per_pixel} bpp "
            f"row {file_row} (offset {start})",
            CorruptedImage,
        )
        return start

    def _read_uncompressed(self, rows: Rows, mapping: RowMapping) -> Rows:
        bpp = self.header.bits_per_pixel
        if bpp in c.INDEXED_BIT_DEPTHS:
            return self._read_indexed(rows, mapping)
        return self._read_direct(rows, mapping)

    def _read_indexed(self, rows: Rows, mapping: RowMapping) -> Rows:
        palette = self._require_palette()
        colours = palette.colours
        bpp = self.header.bits_per_pixel
        width = self.width
        needed = self.row_bytes

        for file_row in range(self.height):
            start = self._scanline(file_row, needed)
            packed = self.data[start:start + needed]
            target = rows[mapping.display_row(file_row)]

            for col in range(width):
                if bpp == 8:
                    index = packed[col]
                elif bpp == 4:
                    byte_val = packed[col // 2]
                    index = (byte_val >> 4) & 0x0F if col % 2 == 0 else byte_val & 0x0F
                else:
                    index = (packed[col // 8] >> (7 - col % 8)) & 0x01

                if index >= len(colours):
                    raise PaletteIndexOutOfRange(
                        index, len(colours), f"({col},{file_row})"
                    )
                target[col] = colours[index]

        return rows

    def _read_direct(self, rows: Rows, mapping: RowMapping) -> Rows:
        bpp = self.header.bits_per_pixel
        width = self.width
        bytes_per_pixel = bpp // 8
        needed = self.row_bytes
        keep_alpha = self.config.rgb32_alpha

        for file_row in range(self.height):
            start = self._scanline(file_row, needed)
            target = rows[mapping.display_row(file_row)]

            if bpp == 16:
                values = struct.unpack_from(f"<{width}H", self.data, start)
                for col, value in enumerate(values):
                    red = ((value & c.RGB555_RED_MASK) >> 10) * c.MAX_8BIT_VALUE // c.RGB5_MAX
                    green = ((value & c.RGB555_GREEN_MASK) >> 5) * c.MAX_8BIT_VALUE // c.RGB5_MAX
                    blue = (value & c.RGB555_BLUE_MASK) * c.MAX_8BIT_VALUE // c.RGB5_MAX
                    target[col] = pack_argb(c.OPAQUE_ALPHA, red, green, blue)
                continue

            for col in range(width):
                pos = start + col * bytes_per_pixel
                blue = self.data[pos]
                green = self.data[pos + 1]
                red = self.data[pos + 2]
                alpha = c.OPAQUE_ALPHA
                if bpp == 32 and keep_alpha:
                    alpha = self.data[pos + 3]
                target[col] = pack_argb(alpha, red, green, blue)

        return rows

    def _read_bitfields(self, rows: Rows, mapping: RowMapping) -> Rows:
        bpp = self.header.bits_per_pixel
        masks: ChannelMasks = resolve_masks(self.header)
        logger.debug(
            "Bitfield masks R=0x%08X G=0x%08X B=0x%08X A=0x%08X",
            masks.red,
            masks.green,
            masks.blue,
            masks.alpha,
        )
        width = self.width
        fmt = f"<{width}{'H' if bpp == 16 else 'I'}"
        needed = self.row_bytes

        for file_row in range(self.height):
            start = self._scanline(file_row, needed)
            target = rows[mapping.display_row(file_row)]

            for col, value in enumerate(struct.unpack_from(fmt, self.data, start)):
                alpha = extract_component(value, masks.alpha) if masks.alpha else c.OPAQUE_ALPHA
                target[col] = pack_argb(
                    alpha,
                    extract_component(value, masks.red),
                    extract_component(value, masks.green),
                    extract_component(value, masks.blue),
                )

        return rows

    def _rle8_decoder(self, mapping: RowMapping) -> Rle8Decoder:
        if self.header.bits_per_pixel != 8:
            raise UnsupportedBitDepth(
                self.header.bits_per_pixel,
                "BI_RLE8 compression is only valid for 8 bits per pixel.",
            )
        return Rle8Decoder(
            self.data,
            self.data_offset,
            self.width,
            self.height,
            mapping,
            self._require_palette(),
        )
