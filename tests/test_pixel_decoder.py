"""Tests for pixel reconstruction across compression paths."""

import struct
import tracemalloc

import pytest

from bitmap_decoder.bitmap_image import BitmapImage
from bitmap_decoder.config import DecoderConfig
from bitmap_decoder.constants import Compression
from bitmap_decoder.errors import (
    CorruptedImage,
    PaletteIndexOutOfRange,
    UnsupportedBitDepth,
    UnsupportedCompression,
)

RED = 0xFFFF0000
GREEN = 0xFF00FF00
BLUE = 0xFF0000FF
BLACK = 0xFF000000
WHITE = 0xFFFFFFFF


def decode(data, config=None):
    return BitmapImage(data, config).decode()


def u16_row(*values):
    return struct.pack(f"<{len(values)}H", *values)


def u32_row(*values):
    return struct.pack(f"<{len(values)}I", *values)


class TestDirectColour:
    """BI_RGB 16, 24 and 32 bpp."""

    def test_single_red_pixel(self, red_pixel_bmp):
        grid = decode(red_pixel_bmp)

        assert (grid.width, grid.height) == (1, 1)
        assert grid.pixel(0, 0) == RED

    def test_bytes_are_blue_green_red(self, make_bmp):
        grid = decode(make_bmp(1, 1, 24, rows=[b"\xff\x00\x00"]))
        assert grid.pixel(0, 0) == BLUE

    def test_24bpp_rows_with_padding(self, make_bmp):
        rows = [b"\x00\x00\xff\x00\xff\x00", b"\xff\x00\x00\xff\xff\xff"]
        grid = decode(make_bmp(2, 2, 24, rows=rows))

        # bottom-up: first stored row is displayed last
        assert grid.rows == [[BLUE, WHITE], [RED, GREEN]]

    def test_rgb555(self, make_bmp):
        grid = decode(make_bmp(4, 1, 16, rows=[u16_row(0x7C00, 0x03E0, 0x7FFF, 16 << 10)]))

        assert grid.rows[0][:3] == [RED, GREEN, WHITE]
        # 16 * 255 // 31 = 131
        assert grid.pixel(3, 0) == 0xFF830000

    def test_32bpp_fourth_byte_is_alpha(self, make_bmp):
        grid = decode(make_bmp(2, 1, 32, rows=[b"\x00\x00\xff\x80\xff\x00\x00\x00"]))
        assert grid.rows[0] == [0x80FF0000, 0x000000FF]

    def test_32bpp_fourth_byte_as_padding(self, make_bmp):
        data = make_bmp(2, 1, 32, rows=[b"\x00\x00\xff\x80\xff\x00\x00\x00"])
        grid = decode(data, DecoderConfig(rgb32_alpha=False))
        assert grid.rows[0] == [RED, BLUE]

    def test_truncated_pixel_data(self, make_bmp):
        data = make_bmp(4, 4, 24, rows=[b"\x00" * 12] * 4)
        with pytest.raises(CorruptedImage, match="out of bounds"):
            decode(data[:-10])

    @pytest.mark.parametrize(
        "bpp,compression,header_size",
        [
            (24, Compression.BI_RGB, 40),
            (8, Compression.BI_RGB, 40),
            (32, Compression.BI_BITFIELDS, 56),
        ],
    )
    def test_oversized_geometry_fails_before_allocating(self, make_bmp, bpp, compression,
                                                        header_size):
        palette = [(0, 0, 0, 0)] * 256 if bpp == 8 else b""
        data = make_bmp(3000, 3000, bpp, compression=compression, header_size=header_size,
                        palette=palette, pixels=b"\x00" * 12)
        image = BitmapImage(data)

        tracemalloc.start()
        try:
            with pytest.raises(CorruptedImage, match="row 2999"):
                image.decode()
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()

        assert peak < 1_000_000


class TestRowOrder:
    """Sign of the height selects the stored row order."""

    def test_top_down_mirrors_bottom_up(self, make_bmp):
        rows = [bytes([i, 0, 0, 0, i, 0]) for i in range(10)]
        bottom_up = decode(make_bmp(2, 10, 24, rows=rows))
        top_down = decode(make_bmp(2, -10, 24, rows=rows))

        assert bottom_up.height == top_down.height == 10
        assert bottom_up.rows == list(reversed(top_down.rows))
        assert top_down.pixel(0, 0) == BLACK
        assert top_down.pixel(0, 9) == 0xFF000009

    def test_zero_height_decodes_one_row(self, make_bmp):
        grid = decode(make_bmp(1, 0, 24, rows=[b"\x00\x00\xff"]))

        assert (grid.width, grid.height) == (1, 1)
        assert grid.pixel(0, 0) == RED


class TestIndexed:
    """BI_RGB 1, 4 and 8 bpp palette lookups."""

    def test_1bpp_bits_msb_first(self, make_bmp):
        palette = [(0, 0, 0, 0), (255, 255, 255, 0)]
        grid = decode(make_bmp(10, 1, 1, palette=palette, rows=[b"\xa0\x40"]))

        assert grid.rows[0] == [WHITE, BLACK, WHITE] + [BLACK] * 6 + [WHITE]

    def test_4bpp_high_nibble_first(self, make_bmp):
        palette = [(0, 0, 0, 0), (0, 0, 255, 0), (0, 255, 0, 0), (255, 0, 0, 0)]
        grid = decode(make_bmp(3, 1, 4, palette=palette, n_colours=4,
                               important_colours=4, rows=[b"\x12\x30"]))

        assert grid.rows[0] == [RED, GREEN, BLUE]

    def test_8bpp_pixels_come_from_palette(self, make_bmp, grey_palette):
        rows = [bytes(range(i * 5, i * 5 + 5)) for i in range(3)]
        image = BitmapImage(make_bmp(5, 3, 8, palette=grey_palette, rows=rows))
        grid = image.decode()
        entries = set(image.palette)

        assert len(image.palette) == 256
        assert all(argb in entries for row in grid for argb in row)
        assert grid.pixel(0, 2) == 0xFF000000
        assert grid.pixel(4, 0) == 0xFF0E0E0E

    def test_index_beyond_palette(self, make_bmp):
        palette = [(0, 0, 0, 0), (255, 255, 255, 0)]
        data = make_bmp(2, 1, 8, palette=palette, n_colours=2,
                        important_colours=2, rows=[b"\x01\x07"])

        with pytest.raises(PaletteIndexOutOfRange, match=r"at pixel \(1,0\)"):
            decode(data)

    def test_unsupported_indexed_depth(self, make_bmp):
        data = make_bmp(1, 1, 2, palette=[(0, 0, 0, 0)] * 4, rows=[b"\x00"])
        with pytest.raises(UnsupportedBitDepth):
            decode(data)


class TestBitfields:
    """BI_BITFIELDS and BI_ALPHABITFIELDS."""

    def test_explicit_rgb555_matches_uncompressed_16bpp(self, make_bmp):
        values = (0x0000, 0x7C00, 0x03E0, 0x001F, 0x7FFF, 0x7C1F)
        plain = decode(make_bmp(6, 1, 16, rows=[u16_row(*values)]))
        masked = decode(make_bmp(
            6, 1, 16, header_size=52, compression=Compression.BI_BITFIELDS,
            masks=(0x7C00, 0x03E0, 0x001F), rows=[u16_row(*values)],
        ))
        assert masked == plain

    def test_default_masks_match_explicit_rgb565(self, make_bmp):
        values = tuple(range(0, 0x10000, 0x0421))
        explicit = decode(make_bmp(
            len(values), 1, 16, header_size=52, compression=Compression.BI_BITFIELDS,
            masks=(0xF800, 0x07E0, 0x001F), rows=[u16_row(*values)],
        ))
        default = decode(make_bmp(
            len(values), 1, 16, header_size=52, compression=Compression.BI_BITFIELDS,
            rows=[u16_row(*values)],
        ))
        assert explicit == default

    def test_trailing_masks_after_info_header(self, make_bmp):
        data = make_bmp(
            2, 1, 16, compression=Compression.BI_BITFIELDS,
            trailing_masks=(0x7C00, 0x03E0, 0x001F), rows=[u16_row(0x7C00, 0x001F)],
        )
        assert decode(data).rows[0] == [RED, BLUE]

    def test_32bpp_v3_alpha_mask(self, make_bmp):
        data = make_bmp(
            1, 1, 32, header_size=56, compression=Compression.BI_BITFIELDS,
            masks=(0x00FF0000, 0x0000FF00, 0x000000FF, 0xFF000000),
            rows=[u32_row(0x40123456)],
        )
        assert decode(data).pixel(0, 0) == 0x40123456

    def test_32bpp_info_defaults_force_opaque(self, make_bmp):
        data = make_bmp(1, 1, 32, compression=Compression.BI_BITFIELDS,
                        rows=[u32_row(0x40123456)])
        assert decode(data).pixel(0, 0) == 0xFF123456

    def test_alpha_bitfields_trailing_masks(self, make_bmp):
        data = make_bmp(
            1, 1, 32, compression=Compression.BI_ALPHABITFIELDS,
            trailing_masks=(0x0000FF00, 0x00FF0000, 0xFF000000, 0x000000FF),
            rows=[u32_row(0x11223344)],
        )
        assert decode(data).pixel(0, 0) == 0x44332211

    def test_bitfields_need_16_or_32_bpp(self, make_bmp):
        data = make_bmp(1, 1, 24, header_size=52, compression=Compression.BI_BITFIELDS,
                        rows=[b"\x00\x00\x00"])
        with pytest.raises(UnsupportedBitDepth, match="16 or 32"):
            decode(data)


class TestRle8Images:
    """BI_RLE8 through the full decoder."""

    def _rle_bmp(self, make_bmp, stream, width=4, height=2, bpp=8):
        return make_bmp(
            width, height, bpp, compression=Compression.BI_RLE8,
            palette=[(i, i, i, 0) for i in range(1 << bpp)],
            pixels=bytes(stream),
        )

    def test_run_on_bottom_row(self, make_bmp):
        grid = decode(self._rle_bmp(make_bmp, [0x03, 0x05, 0x00, 0x01]))

        assert grid.complete
        assert grid.rows[1] == [0xFF050505] * 3 + [0]
        assert grid.rows[0] == [0, 0, 0, 0]

    def test_partial_grid_on_corruption(self, make_bmp):
        grid = decode(self._rle_bmp(make_bmp, [0x04, 0x09, 0x00, 0x00, 0x00, 0x02, 0x01]))

        assert not grid.complete
        assert grid.rows[1] == [0xFF090909] * 4
        assert any("RLE8" in message for message in grid.diagnostics)

    def test_rle8_needs_8bpp(self, make_bmp):
        data = self._rle_bmp(make_bmp, [0x00, 0x01], bpp=4)
        with pytest.raises(UnsupportedBitDepth, match="8 bits per pixel"):
            decode(data)


class TestUnsupportedCompression:
    @pytest.mark.parametrize(
        "compression,message",
        [
            (Compression.BI_RLE4, "BI_RLE4"),
            (Compression.BI_JPEG, "JPEG or PNG"),
            (Compression.BI_PNG, "JPEG or PNG"),
            (9, "9"),
        ],
    )
    def test_reported(self, make_bmp, compression, message):
        data = make_bmp(2, 2, 24, compression=compression, pixels=b"\x00" * 16)
        with pytest.raises(UnsupportedCompression, match=message) as excinfo:
            decode(data)
        assert excinfo.value.compression == compression


class TestOffsetFallback:
    """Unusable declared offsets are rebuilt from the header layout."""

    @pytest.mark.parametrize("declared", [0, 0xFFFFFFFF, 4096])
    def test_direct_colour(self, make_bmp, declared):
        data = make_bmp(1, 1, 24, rows=[b"\x00\x00\xff"], pixel_offset=declared)
        image = BitmapImage(data)
        grid = image.decode()

        assert image.offset == declared
        assert image.data_offset == 54
        assert grid.pixel(0, 0) == RED
        assert any("computed from header geometry" in m for m in grid.diagnostics)

    def test_includes_palette(self, make_bmp):
        palette = [(0, 0, 0, 0), (0, 0, 255, 0)]
        data = make_bmp(1, 1, 1, palette=palette, rows=[b"\x80"], pixel_offset=0)
        image = BitmapImage(data)

        assert image.data_offset == 54 + 8
        assert image.decode().pixel(0, 0) == RED

    def test_includes_mask_block(self, make_bmp):
        data = make_bmp(
            1, 1, 16, compression=Compression.BI_BITFIELDS,
            trailing_masks=(0x7C00, 0x03E0, 0x001F), rows=[u16_row(0x03E0)],
            pixel_offset=0,
        )
        image = BitmapImage(data)

        assert image.data_offset == 54 + 12
        assert image.decode().pixel(0, 0) == GREEN

    def test_valid_offset_has_no_diagnostics(self, red_pixel_bmp):
        assert BitmapImage(red_pixel_bmp).decode().diagnostics == []
