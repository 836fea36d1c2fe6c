"""Channel bit masks for BI_BITFIELDS / BI_ALPHABITFIELDS images."""

from dataclasses import dataclass

from . import constants as c
from .dib_header import DIBHeader, HeaderType


@dataclass(frozen=True)
class ChannelMasks:
    red: int
    green: int
    blue: int
    alpha: int = 0


def _trailing_zeros(mask: int) -> int:
    return (mask & -mask).bit_length() - 1


def extract_component(value: int, mask: int) -> int:
    """
    Extract one channel from a raw pixel value and scale it to 8 bits.

    Components narrower than 8 bits are scaled linearly so that 0 maps to 0
    and the largest value maps to 255. Wider components keep their top 8
    bits. A zero mask yields 0.
    """
    if mask == 0:
        return 0

    component = (value & mask) >> _trailing_zeros(mask)
    bits = bin(mask).count("1")
    if bits < 8:
        return int(component * 255.0 / ((1 << bits) - 1) + 0.5)
    if bits > 8:
        return component >> (bits - 8)
    return component


def default_masks(header: DIBHeader) -> ChannelMasks:
    """Masks implied by the bit depth when the file declares none."""
    if header.bits_per_pixel == 16:
        return ChannelMasks(c.RGB565_RED_MASK, c.RGB565_GREEN_MASK, c.RGB565_BLUE_MASK, 0)

    alpha = 0 if header.header_type is HeaderType.BITMAPINFOHEADER else c.RGB8_ALPHA_MASK
    return ChannelMasks(c.RGB8_RED_MASK, c.RGB8_GREEN_MASK, c.RGB8_BLUE_MASK, alpha)


def resolve_masks(header: DIBHeader) -> ChannelMasks:
    """
    Pick the channel masks for a bitfield-compressed image.

    V2 headers supply red/green/blue; V3, V4 and V5 also supply alpha. A
    plain BITMAPINFOHEADER may be followed by 12 (or 16 with
    BI_ALPHABITFIELDS) bytes of masks. If red, green and blue all come out
    zero the defaults for the bit depth are used instead.
    """
    red = green = blue = alpha = 0

    if header.has_colour_masks:
        red, green, blue = header.red_mask, header.green_mask, header.blue_mask
        alpha = header.alpha_mask or 0
    elif header.extra_masks:
        red, green, blue = header.extra_masks[:3]
        if len(header.extra_masks) > 3:
            alpha = header.extra_masks[3]

    if red == 0 and green == 0 and blue == 0:
        return default_masks(header)
    return ChannelMasks(red, green, blue, alpha)
