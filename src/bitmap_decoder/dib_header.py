"""
DIB header variants and the size-discriminated factory.

Six historical header layouts are supported. Each one is a strict
extension of the previous:

    BITMAPCOREHEADER   (12)  16-bit geometry, nothing else
    BITMAPINFOHEADER   (40)  32-bit geometry, compression, sizes, colour counts
    BITMAPV2INFOHEADER (52)  + red/green/blue masks
    BITMAPV3INFOHEADER (56)  + alpha mask
    BITMAPV4HEADER     (108) + colour space, CIEXYZ endpoints, gamma
    BITMAPV5HEADER     (124) + ICC intent, profile data/size, reserved

All variants share one flat ``DIBHeader`` record. Fields a variant does not
define are ``None``; ``DIBHeader.require`` turns that into an
``UnsupportedForHeaderType`` error for accessors.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple
import logging

from . import constants as c
from .byte_reader import read_i16, read_i32, read_u16, read_u32
from .errors import TruncatedHeader, UnknownHeaderSize, UnsupportedForHeaderType

logger = logging.getLogger(__name__)


class HeaderType(Enum):
    """DIB header variant, valued by its size in bytes."""
    BITMAPCOREHEADER = c.BITMAPCOREHEADER_SIZE
    BITMAPINFOHEADER = c.BITMAPINFOHEADER_SIZE
    BITMAPV2INFOHEADER = c.BITMAPV2INFOHEADER_SIZE
    BITMAPV3INFOHEADER = c.BITMAPV3INFOHEADER_SIZE
    BITMAPV4HEADER = c.BITMAPV4HEADER_SIZE
    BITMAPV5HEADER = c.BITMAPV5HEADER_SIZE

    @property
    def size(self) -> int:
        return self.value

    @classmethod
    def from_size(cls, size: int) -> Optional["HeaderType"]:
        """Return the variant for a header size, or None if unknown."""
        for header_type in cls:
            if header_type.value == size:
                return header_type
        return None


FIXED_POINT_ONE = 1 << 30


@dataclass(frozen=True)
class CIEXYZ:
    """One CIEXYZ coordinate triple in FXPT2DOT30 fixed point."""
    x: int
    y: int
    z: int

    def as_floats(self) -> Tuple[float, float, float]:
        return (
            self.x / FIXED_POINT_ONE,
            self.y / FIXED_POINT_ONE,
            self.z / FIXED_POINT_ONE,
        )


@dataclass(frozen=True)
class CIEXYZTriple:
    """Red, green and blue endpoints of a V4/V5 calibrated colour space."""
    red: CIEXYZ
    green: CIEXYZ
    blue: CIEXYZ


@dataclass(frozen=True)
class DIBHeader:
    header_type: HeaderType
    header_size: int
    width: int
    height: int
    colour_planes: int
    bits_per_pixel: int
    compression: int = 0
    image_data_size: int = 0
    x_resolution: int = 0
    y_resolution: int = 0
    n_colours: int = 0
    important_colours: int = 0
    # V2 and later
    red_mask: Optional[int] = None
    green_mask: Optional[int] = None
    blue_mask: Optional[int] = None
    # V3 and later
    alpha_mask: Optional[int] = None
    # V4 and later
    cs_type: Optional[int] = None
    endpoints: Optional[CIEXYZTriple] = None
    gamma_red: Optional[int] = None
    gamma_green: Optional[int] = None
    gamma_blue: Optional[int] = None
    # V5
    intent: Optional[int] = None
    profile_data: Optional[int] = None
    profile_size: Optional[int] = None
    reserved: Optional[int] = None
    # Masks stored after a plain BITMAPINFOHEADER (BI_BITFIELDS/BI_ALPHABITFIELDS)
    extra_masks: Optional[Tuple[int, ...]] = None

    @property
    def abs_height(self) -> int:
        return abs(self.height)

    @property
    def is_top_down(self) -> bool:
        return self.height < 0

    @property
    def has_colour_masks(self) -> bool:
        return self.red_mask is not None

    @property
    def has_alpha_mask(self) -> bool:
        return self.alpha_mask is not None

    def require(self, field_name: str) -> Any:
        """Return a variant-specific field or raise UnsupportedForHeaderType."""
        value = getattr(self, field_name)
        if value is None:
            raise UnsupportedForHeaderType(field_name, self.header_type.name)
        return value


def scanline_bytes(width: int, bits_per_pixel: int) -> int:
    """Bytes in one stored row, padded to a 4-byte boundary."""
    bytes_per_row = (width * bits_per_pixel + 7) // 8
    return (bytes_per_row + 3) // 4 * 4


def bitmap_data_size(width: int, height: int, bits_per_pixel: int) -> int:
    return scanline_bytes(width, bits_per_pixel) * abs(height)


def _parse_core(data: bytes, base: int) -> Dict[str, Any]:
    return {
        "width": read_u16(data, base + c.BI_CORE_WIDTH_OFFSET),
        "height": read_i16(data, base + c.BI_CORE_HEIGHT_OFFSET),
        "colour_planes": read_u16(data, base + c.BI_CORE_PLANES_OFFSET),
        "bits_per_pixel": read_u16(data, base + c.BI_CORE_BITCOUNT_OFFSET),
    }


def _parse_info(data: bytes, base: int) -> Dict[str, Any]:
    width = abs(read_i32(data, base + c.BI_WIDTH_OFFSET))
    height = read_i32(data, base + c.BI_HEIGHT_OFFSET)
    bits_per_pixel = read_u16(data, base + c.BI_BITCOUNT_OFFSET)
    compression = read_u32(data, base + c.BI_COMPRESSION_OFFSET)

    image_data_size = read_u32(data, base + c.BI_SIZEIMAGE_OFFSET)
    if image_data_size == 0 and compression == c.Compression.BI_RGB:
        image_data_size = bitmap_data_size(width, height, bits_per_pixel)

    return {
        "width": width,
        "height": height,
        "colour_planes": read_u16(data, base + c.BI_PLANES_OFFSET),
        "bits_per_pixel": bits_per_pixel,
        "compression": compression,
        "image_data_size": image_data_size,
        "x_resolution": read_i32(data, base + c.BI_X_PELS_PER_METER_OFFSET),
        "y_resolution": read_i32(data, base + c.BI_Y_PELS_PER_METER_OFFSET),
        "n_colours": read_u32(data, base + c.BI_CLR_USED_OFFSET),
        "important_colours": read_u32(data, base + c.BI_CLR_IMPORTANT_OFFSET),
    }


def _parse_info_with_trailing_masks(data: bytes, base: int) -> Dict[str, Any]:
    fields = _parse_info(data, base)
    compression = fields["compression"]
    if compression == c.Compression.BI_BITFIELDS:
        count = c.BITFIELD_MASKS_SIZE // 4
    elif compression == c.Compression.BI_ALPHABITFIELDS:
        count = c.ALPHABITFIELD_MASKS_SIZE // 4
    else:
        return fields

    start = base + c.BITMAPINFOHEADER_SIZE
    if start + count * 4 <= len(data):
        fields["extra_masks"] = tuple(
            read_u32(data, start + i * 4) for i in range(count)
        )
    else:
        logger.debug("Bitfield masks after BITMAPINFOHEADER are missing")
    return fields


def _parse_v2(data: bytes, base: int) -> Dict[str, Any]:
    fields = _parse_info(data, base)
    fields["red_mask"] = read_u32(data, base + c.BV2_RED_MASK_OFFSET)
    fields["green_mask"] = read_u32(data, base + c.BV2_GREEN_MASK_OFFSET)
    fields["blue_mask"] = read_u32(data, base + c.BV2_BLUE_MASK_OFFSET)
    return fields


def _parse_v3(data: bytes, base: int) -> Dict[str, Any]:
    fields = _parse_v2(data, base)
    fields["alpha_mask"] = read_u32(data, base + c.BV3_ALPHA_MASK_OFFSET)
    return fields


def _read_xyz(data: bytes, offset: int) -> CIEXYZ:
    return CIEXYZ(
        x=read_i32(data, offset),
        y=read_i32(data, offset + 4),
        z=read_i32(data, offset + 8),
    )


def _parse_v4(data: bytes, base: int) -> Dict[str, Any]:
    fields = _parse_v3(data, base)
    endpoints_start = base + c.BV4_ENDPOINTS_OFFSET
    fields["cs_type"] = read_u32(data, base + c.BV4_CS_TYPE_OFFSET)
    fields["endpoints"] = CIEXYZTriple(
        red=_read_xyz(data, endpoints_start),
        green=_read_xyz(data, endpoints_start + 12),
        blue=_read_xyz(data, endpoints_start + 24),
    )
    fields["gamma_red"] = read_u32(data, base + c.BV4_GAMMA_RED_OFFSET)
    fields["gamma_green"] = read_u32(data, base + c.BV4_GAMMA_GREEN_OFFSET)
    fields["gamma_blue"] = read_u32(data, base + c.BV4_GAMMA_BLUE_OFFSET)
    return fields


def _parse_v5(data: bytes, base: int) -> Dict[str, Any]:
    fields = _parse_v4(data, base)
    fields["intent"] = read_u32(data, base + c.BV5_INTENT_OFFSET)
    fields["profile_data"] = read_u32(data, base + c.BV5_PROFILE_DATA_OFFSET)
    fields["profile_size"] = read_u32(data, base + c.BV5_PROFILE_SIZE_OFFSET)
    fields["reserved"] = read_u32(data, base + c.BV5_RESERVED_OFFSET)
    return fields


_PARSERS: Dict[HeaderType, Callable[[bytes, int], Dict[str, Any]]] = {
    HeaderType.BITMAPCOREHEADER: _parse_core,
    HeaderType.BITMAPINFOHEADER: _parse_info_with_trailing_masks,
    HeaderType.BITMAPV2INFOHEADER: _parse_v2,
    HeaderType.BITMAPV3INFOHEADER: _parse_v3,
    HeaderType.BITMAPV4HEADER: _parse_v4,
    HeaderType.BITMAPV5HEADER: _parse_v5,
}


def create_dib_header(data: bytes, offset: int = c.FILE_HEADER_SIZE) -> DIBHeader:
    """
    Parse the DIB header that starts at ``offset``.

    Args:
        data: The whole BMP file
        offset: File offset of the DIB header (14 for every BMP file)

    Returns:
        DIBHeader for the variant selected by the declared header size.

    Raises:
        TruncatedHeader: If the size field or the declared header is cut off
        UnknownHeaderSize: If the size is not one of 12/40/52/56/108/124
    """
    if len(data) < offset + 4:
        raise TruncatedHeader("Byte array too short to hold a DIB header size.")

    header_size = read_u32(data, offset + c.BI_SIZE_OFFSET)
    header_type = HeaderType.from_size(header_size)
    if header_type is None:
        raise UnknownHeaderSize(header_size)

    if len(data) < offset + header_size:
        raise TruncatedHeader(
            f"Byte array too short for {header_type.name} "
            f"({len(data)} < {offset + header_size})."
        )

    fields = _PARSERS[header_type](data, offset)
    header = DIBHeader(header_type=header_type, header_size=header_size, **fields)
    logger.debug(
        "Parsed %s: %dx%d, %d bpp, compression %d",
        header_type.name,
        header.width,
        header.height,
        header.bits_per_pixel,
        header.compression,
    )
    return header
