"""Tests for colour table sizing and parsing."""

import pytest

from bitmap_decoder.constants import Compression
from bitmap_decoder.dib_header import create_dib_header
from bitmap_decoder.errors import PaletteIndexOutOfRange, PaletteTruncated
from bitmap_decoder.palette import (
    ColourPalette,
    pack_argb,
    palette_entry_count,
    palette_entry_width,
    palette_start,
)


def _palette(data):
    header = create_dib_header(data)
    return ColourPalette.from_bytes(data, header, palette_start(header))


class TestEntryCount:
    """Declared versus synthesized palette sizes."""

    def test_zero_declared_uses_full_depth(self, make_bmp, grey_palette):
        data = make_bmp(1, 1, 8, palette=grey_palette, rows=[b"\x00"])
        header = create_dib_header(data)

        assert palette_entry_count(header) == 256
        assert len(_palette(data)) == 256

    def test_declared_within_important(self, make_bmp):
        data = make_bmp(1, 1, 8, palette=[(0, 0, 0, 0)] * 4,
                        n_colours=4, important_colours=4, rows=[b"\x00"])
        assert palette_entry_count(create_dib_header(data)) == 4

    def test_declared_above_important_uses_full_depth(self, make_bmp):
        data = make_bmp(1, 1, 4, palette=[(0, 0, 0, 0)] * 16,
                        n_colours=4, important_colours=2, rows=[b"\x00"])
        assert palette_entry_count(create_dib_header(data)) == 16

    def test_one_bit_palette(self, make_bmp):
        data = make_bmp(1, 1, 1, palette=[(0, 0, 0, 0), (255, 255, 255, 0)], rows=[b"\x00"])
        assert palette_entry_count(create_dib_header(data)) == 2


class TestEntryParsing:
    """BGR(A) entry decoding."""

    def test_rgbquad_entries(self, make_bmp):
        data = make_bmp(
            1, 1, 1,
            palette=[(0x10, 0x20, 0x30, 0x00), (0xFF, 0x00, 0x00, 0x00)],
            rows=[b"\x00"],
        )
        palette = _palette(data)

        assert palette.colours == (0xFF302010, 0xFF0000FF)
        assert not palette.has_alpha_channel

    def test_core_header_uses_triples(self, make_bmp):
        data = make_bmp(
            1, 1, 1, header_size=12,
            palette=[(0x00, 0x00, 0xFF), (0x00, 0xFF, 0x00)],
            rows=[b"\x00"],
        )
        header = create_dib_header(data)
        palette = _palette(data)

        assert palette_entry_width(header) == 3
        assert palette_start(header) == 26
        assert palette.colours == (0xFFFF0000, 0xFF00FF00)

    def test_translucent_entry_sets_alpha_flag(self, make_bmp):
        data = make_bmp(
            1, 1, 1,
            palette=[(0, 0, 0, 0x80), (0, 0, 0, 0)],
            rows=[b"\x00"],
        )
        palette = _palette(data)

        assert palette.has_alpha_channel
        assert palette.colour(0) == 0x80000000
        assert palette.colour(1) == 0xFF000000

    def test_header_alpha_mask_sets_alpha_flag(self, make_bmp):
        data = make_bmp(
            1, 1, 1, header_size=56, masks=(0, 0, 0, 0xFF000000),
            palette=[(0, 0, 0, 0), (1, 1, 1, 0)],
            rows=[b"\x00"],
        )
        assert _palette(data).has_alpha_channel

    def test_truncated_palette(self, make_bmp):
        data = make_bmp(1, 1, 8, palette=[(0, 0, 0, 0)] * 10)
        with pytest.raises(PaletteTruncated, match="entry 10"):
            _palette(data)

    def test_palette_start_skips_mask_block(self, make_bmp):
        data = make_bmp(1, 1, 16, compression=Compression.BI_BITFIELDS,
                        trailing_masks=(0xF800, 0x07E0, 0x001F))
        assert palette_start(create_dib_header(data)) == 14 + 40 + 12

    def test_palette_start_v3_has_no_mask_block(self, make_bmp):
        data = make_bmp(1, 1, 16, header_size=56, compression=Compression.BI_BITFIELDS)
        assert palette_start(create_dib_header(data)) == 14 + 56


class TestLookup:
    def test_out_of_range_index(self):
        palette = ColourPalette((0xFF000000, 0xFFFFFFFF))
        with pytest.raises(PaletteIndexOutOfRange, match=r"\[0, 1\]"):
            palette.colour(2)

    def test_iteration_follows_index_order(self):
        palette = ColourPalette((1, 2, 3))
        assert list(palette) == [1, 2, 3]

    def test_pack_argb(self):
        assert pack_argb(0xFF, 0x12, 0x34, 0x56) == 0xFF123456
