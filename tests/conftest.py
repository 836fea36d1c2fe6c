"""Shared fixtures: synthetic BMP buffers and Pillow-written files."""

import io
import struct
from typing import Iterable, Optional, Sequence, Tuple, Union

import pytest
from PIL import Image


def pad_row(row: bytes) -> bytes:
    """Pad a stored row to a 4-byte boundary."""
    return row + b"\x00" * (-len(row) % 4)


def build_bmp(
    width: int,
    height: int,
    bits_per_pixel: int = 24,
    pixels: bytes = b"",
    rows: Optional[Iterable[bytes]] = None,
    header_size: int = 40,
    compression: int = 0,
    palette: Union[bytes, Sequence[Tuple[int, ...]]] = b"",
    n_colours: int = 0,
    important_colours: int = 0,
    masks: Optional[Tuple[int, ...]] = None,
    trailing_masks: Optional[Tuple[int, ...]] = None,
    image_data_size: int = 0,
    x_resolution: int = 2835,
    y_resolution: int = 2835,
    pixel_offset: Optional[int] = None,
    colour_planes: int = 1,
    cs_type: int = 0x73524742,
    gamma: Tuple[int, int, int] = (0, 0, 0),
    profile: Tuple[int, int, int] = (4, 0, 0),
) -> bytes:
    """
    Assemble a BMP file in memory.

    ``rows`` are stored rows in file order (unpadded; padding is added).
    ``palette`` entries are (blue, green, red) or (blue, green, red, x)
    tuples, or already-packed bytes. ``masks`` go into V2+ header fields;
    ``trailing_masks`` are written straight after the DIB header.
    """
    if rows is not None:
        pixels = b"".join(pad_row(bytes(row)) for row in rows)

    if header_size == 12:
        dib = struct.pack("<IHhHH", 12, width, height, colour_planes, bits_per_pixel)
    else:
        dib = struct.pack(
            "<IiiHHIIiiII",
            header_size,
            width,
            height,
            colour_planes,
            bits_per_pixel,
            compression,
            image_data_size,
            x_resolution,
            y_resolution,
            n_colours,
            important_colours,
        )
        red, green, blue, alpha = tuple(masks or ()) + (0,) * (4 - len(masks or ()))
        if header_size >= 52:
            dib += struct.pack("<III", red, green, blue)
        if header_size >= 56:
            dib += struct.pack("<I", alpha)
        if header_size >= 108:
            endpoints = struct.pack("<9i", *range(1, 10))
            dib += struct.pack("<I", cs_type) + endpoints + struct.pack("<III", *gamma)
        if header_size >= 124:
            dib += struct.pack("<IIII", *profile, 0)
        dib = dib.ljust(header_size, b"\x00")

    extra = b""
    if trailing_masks:
        extra = struct.pack(f"<{len(trailing_masks)}I", *trailing_masks)

    if isinstance(palette, (bytes, bytearray)):
        palette_bytes = bytes(palette)
    else:
        palette_bytes = b"".join(bytes(entry) for entry in palette)

    offset = 14 + len(dib) + len(extra) + len(palette_bytes)
    file_size = offset + len(pixels)
    if pixel_offset is None:
        pixel_offset = offset

    file_header = b"BM" + struct.pack("<IHHI", file_size, 0, 0, pixel_offset)
    return file_header + dib + extra + palette_bytes + pixels


def encode_with_pillow(image: Image.Image) -> bytes:
    """Encode a Pillow image as BMP bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format="BMP")
    return buffer.getvalue()


@pytest.fixture
def make_bmp():
    """Factory fixture returning build_bmp."""
    return build_bmp


@pytest.fixture
def pillow_bmp():
    """Factory fixture returning encode_with_pillow."""
    return encode_with_pillow


@pytest.fixture
def red_pixel_bmp() -> bytes:
    """1x1 24 bpp image whose single pixel is opaque red."""
    return build_bmp(1, 1, 24, rows=[b"\x00\x00\xff"])


@pytest.fixture
def grey_palette():
    """256-entry grey palette in BGRX order with a zero fourth byte."""
    return [(v, v, v, 0) for v in range(256)]


@pytest.fixture
def bmp_file(tmp_path):
    """Write bytes to a .bmp file under tmp_path and return its path."""
    def _write(data: bytes, name: str = "image.bmp"):
        path = tmp_path / name
        path.write_bytes(data)
        return path
    return _write
