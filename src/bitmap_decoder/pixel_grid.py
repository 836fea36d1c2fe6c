"""Decoded ARGB pixel raster and the file-row to display-row mapping."""

from dataclasses import dataclass, field
from typing import Iterator, List


@dataclass(frozen=True)
class RowMapping:
    """
    Maps a stored (file) row index to a display row index.

    Bottom-up images (positive height) store the display-bottom row first,
    so file row 0 lands on display row ``height - 1``. Top-down images map
    file row 0 to display row 0.
    """
    multiplier: int
    offset: int

    @classmethod
    def for_height(cls, signed_height: int) -> "RowMapping":
        if signed_height > 0:
            return cls(multiplier=-1, offset=signed_height - 1)
        return cls(multiplier=1, offset=0)

    def display_row(self, file_row: int) -> int:
        return self.offset + file_row * self.multiplier


def blank_rows(width: int, height: int) -> List[List[int]]:
    return [[0] * width for _ in range(height)]


@dataclass
class PixelGrid:
    """
    Height-by-width matrix of packed 0xAARRGGBB values, row 0 at the top.

    Attributes:
        width: Pixels per row
        height: Number of rows
        rows: Row-major pixel values
        complete: False when decoding stopped early on a corrupted stream
        diagnostics: Non-fatal conditions met while decoding
    """
    width: int
    height: int
    rows: List[List[int]]
    complete: bool = True
    diagnostics: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return self.height

    def __getitem__(self, row: int) -> List[int]:
        return self.rows[row]

    def __iter__(self) -> Iterator[List[int]]:
        return iter(self.rows)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelGrid):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self.rows == other.rows
        )

    def pixel(self, x: int, y: int) -> int:
        """ARGB value at column ``x`` of display row ``y``."""
        return self.rows[y][x]

    def pixel_count(self) -> int:
        return self.width * self.height

    def copy(self) -> "PixelGrid":
        return PixelGrid(
            width=self.width,
            height=self.height,
            rows=[list(row) for row in self.rows],
            complete=self.complete,
            diagnostics=list(self.diagnostics),
        )
