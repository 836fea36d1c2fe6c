"""Layout constants for the BMP file header, DIB headers and compression codes."""

from enum import IntEnum


# DIB header sizes
BITMAPCOREHEADER_SIZE = 12
BITMAPINFOHEADER_SIZE = 40
BITMAPV2INFOHEADER_SIZE = 52
BITMAPV3INFOHEADER_SIZE = 56
BITMAPV4HEADER_SIZE = 108
BITMAPV5HEADER_SIZE = 124

# BITMAPFILEHEADER
FILE_HEADER_SIZE = 14
BMP_MAGIC = b"BM"
BF_TYPE_OFFSET = 0
BF_SIZE_OFFSET = 2
BF_RESERVED1_OFFSET = 6
BF_RESERVED2_OFFSET = 8
BF_OFFBITS_OFFSET = 10

# Smallest buffer that can hold a file header plus a core header
MIN_BMP_SIZE = FILE_HEADER_SIZE + BITMAPCOREHEADER_SIZE

# Offsets relative to the start of the DIB header (file offset 14)
BI_SIZE_OFFSET = 0

BI_CORE_WIDTH_OFFSET = 4
BI_CORE_HEIGHT_OFFSET = 6
BI_CORE_PLANES_OFFSET = 8
BI_CORE_BITCOUNT_OFFSET = 10

BI_WIDTH_OFFSET = 4
BI_HEIGHT_OFFSET = 8
BI_PLANES_OFFSET = 12
BI_BITCOUNT_OFFSET = 14
BI_COMPRESSION_OFFSET = 16
BI_SIZEIMAGE_OFFSET = 20
BI_X_PELS_PER_METER_OFFSET = 24
BI_Y_PELS_PER_METER_OFFSET = 28
BI_CLR_USED_OFFSET = 32
BI_CLR_IMPORTANT_OFFSET = 36

BV2_RED_MASK_OFFSET = 40
BV2_GREEN_MASK_OFFSET = 44
BV2_BLUE_MASK_OFFSET = 48
BV3_ALPHA_MASK_OFFSET = 52
BV4_CS_TYPE_OFFSET = 56
BV4_ENDPOINTS_OFFSET = 60
BV4_GAMMA_RED_OFFSET = 96
BV4_GAMMA_GREEN_OFFSET = 100
BV4_GAMMA_BLUE_OFFSET = 104
BV5_INTENT_OFFSET = 108
BV5_PROFILE_DATA_OFFSET = 112
BV5_PROFILE_SIZE_OFFSET = 116
BV5_RESERVED_OFFSET = 120


class Compression(IntEnum):
    """biCompression values."""
    BI_RGB = 0
    BI_RLE8 = 1
    BI_RLE4 = 2
    BI_BITFIELDS = 3
    BI_JPEG = 4
    BI_PNG = 5
    BI_ALPHABITFIELDS = 6


def compression_name(value: int) -> str:
    """Return the BI_* name for a compression code, or UNKNOWN(n)."""
    try:
        return Compression(value).name
    except ValueError:
        return f"UNKNOWN({value})"


# Mask blocks that follow a plain BITMAPINFOHEADER
BITFIELD_MASKS_SIZE = 12
ALPHABITFIELD_MASKS_SIZE = 16

# Channel packing
OPAQUE_ALPHA = 0xFF
MAX_8BIT_VALUE = 255

RGB555_RED_MASK = 0x7C00
RGB555_GREEN_MASK = 0x03E0
RGB555_BLUE_MASK = 0x001F
RGB5_MAX = 31

RGB565_RED_MASK = 0xF800
RGB565_GREEN_MASK = 0x07E0
RGB565_BLUE_MASK = 0x001F

RGB8_RED_MASK = 0x00FF0000
RGB8_GREEN_MASK = 0x0000FF00
RGB8_BLUE_MASK = 0x000000FF
RGB8_ALPHA_MASK = 0xFF000000

INDEXED_BIT_DEPTHS = (1, 4, 8)
DIRECT_BIT_DEPTHS = (16, 24, 32)
BITFIELD_BIT_DEPTHS = (16, 32)
