"""Decoder configuration."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DecoderConfig:
    """
    Options that change how pixels are reconstructed.

    Attributes:
        rgb32_alpha: For 32bpp BI_RGB images, read the fourth byte of each
            pixel as alpha. Some writers leave it as zero padding; set False
            to force those pixels opaque.
        alpha_scan_fallback: Let has_alpha_channel() decode the image and
            scan for a non-opaque pixel when neither the palette nor the
            header answers the question.
        memoize: Cache the decoded grid on the BitmapImage.
    """
    rgb32_alpha: bool = True
    alpha_scan_fallback: bool = True
    memoize: bool = True


DEFAULT_CONFIG = DecoderConfig()
