"""Colour table (palette) for images with 8 or fewer bits per pixel."""

from dataclasses import dataclass
from typing import Iterator, Tuple

from . import constants as c
from .dib_header import DIBHeader, HeaderType
from .errors import PaletteIndexOutOfRange, PaletteTruncated


def palette_entry_count(header: DIBHeader) -> int:
    """
    Number of palette entries declared by the header.

    The declared colour count is used when it is non-zero and does not
    exceed the important-colour count; otherwise the palette holds the
    maximum number of colours for the bit depth.
    """
    if header.n_colours == 0 or header.n_colours > header.important_colours:
        return 1 << header.bits_per_pixel
    return header.n_colours


def palette_entry_width(header: DIBHeader) -> int:
    """RGBTRIPLE (3 bytes) for core headers, RGBQUAD (4 bytes) otherwise."""
    if header.header_type is HeaderType.BITMAPCOREHEADER:
        return 3
    return 4


def bitfield_block_size(header: DIBHeader) -> int:
    """Size of the mask block stored between a BITMAPINFOHEADER and the palette."""
    if header.header_type is not HeaderType.BITMAPINFOHEADER:
        return 0
    if header.compression == c.Compression.BI_BITFIELDS:
        return c.BITFIELD_MASKS_SIZE
    if header.compression == c.Compression.BI_ALPHABITFIELDS:
        return c.ALPHABITFIELD_MASKS_SIZE
    return 0


def palette_start(header: DIBHeader) -> int:
    """File offset of the first palette entry."""
    return c.FILE_HEADER_SIZE + header.header_size + bitfield_block_size(header)


def palette_byte_size(header: DIBHeader) -> int:
    if header.bits_per_pixel > 8:
        return 0
    return palette_entry_count(header) * palette_entry_width(header)


def pack_argb(alpha: int, red: int, green: int, blue: int) -> int:
    """Pack 8-bit channels into 0xAARRGGBB."""
    return (alpha << 24) | (red << 16) | (green << 8) | blue


@dataclass(frozen=True)
class ColourPalette:
    """
    Ordered ARGB colour entries; list position is the palette index.

    Attributes:
        colours: Entries packed as 0xAARRGGBB
        has_alpha_channel: True if the header declares an alpha mask or any
            entry carries a non-opaque alpha byte
    """
    colours: Tuple[int, ...]
    has_alpha_channel: bool = False

    def __len__(self) -> int:
        return len(self.colours)

    def __iter__(self) -> Iterator[int]:
        return iter(self.colours)

    def colour(self, index: int) -> int:
        """Return the ARGB colour at ``index``."""
        if index < 0 or index >= len(self.colours):
            raise PaletteIndexOutOfRange(index, len(self.colours))
        return self.colours[index]

    @classmethod
    def from_bytes(cls, data: bytes, header: DIBHeader, start: int) -> "ColourPalette":
        """
        Read the palette that begins at file offset ``start``.

        Entries are stored as Blue, Green, Red and, for RGBQUAD entries, a
        fourth byte. A fourth byte of 0x00 is read as opaque because writers
        normally leave that byte unset; any other value is taken as alpha.

        Raises:
            PaletteTruncated: If any entry runs past the end of ``data``
        """
        count = palette_entry_count(header)
        entry_width = palette_entry_width(header)
        header_alpha = bool(header.alpha_mask)

        colours = []
        found_alpha = False
        for i in range(count):
            entry = start + i * entry_width
            if entry + entry_width > len(data):
                raise PaletteTruncated(
                    f"Palette data truncated or out of bounds at entry {i} "
                    f"(offset: {entry})"
                )

            blue = data[entry]
            green = data[entry + 1]
            red = data[entry + 2]
            alpha = c.OPAQUE_ALPHA
            if entry_width == 4:
                alpha = data[entry + 3] or c.OPAQUE_ALPHA
            if alpha != c.OPAQUE_ALPHA:
                found_alpha = True

            colours.append(pack_argb(alpha, red, green, blue))

        return cls(tuple(colours), header_alpha or found_alpha)
