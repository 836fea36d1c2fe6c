"""Mutable ARGB picture built from a decoded bitmap."""

from pathlib import Path
from typing import List, Optional, Tuple, Union

from PIL import Image

from .bitmap_image import BitmapImage
from .palette import pack_argb

RGBA = Tuple[int, int, int, int]


class Picture:
    """
    Editable copy of a decoded bitmap with column/row pixel access.

    Coordinates are (col, row) with the origin in the upper-left corner by
    default; ``set_origin_lower_left()`` flips the row axis.

    Example:
        picture = Picture.from_path("logo.bmp")
        picture.set(0, 0, (255, 0, 0, 255))
        preview = picture.to_image()
    """

    __hash__ = None  # pictures are mutable

    def __init__(self, image: BitmapImage, title: Optional[str] = None):
        grid = image.decode()
        self._width = grid.width
        self._height = grid.height
        self._pixels: List[List[int]] = grid.rows
        self._origin_upper_left = True
        self.title = title or repr(image)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "Picture":
        return cls(BitmapImage.from_path(path), title=str(path))

    def width(self) -> int:
        return self._width

    def height(self) -> int:
        return self._height

    def set_origin_upper_left(self) -> None:
        self._origin_upper_left = True

    def set_origin_lower_left(self) -> None:
        self._origin_upper_left = False

    def _validate(self, col: int, row: int) -> None:
        if col < 0 or col >= self._width:
            raise IndexError(
                f"column index must be between 0 and {self._width - 1}: {col}"
            )
        if row < 0 or row >= self._height:
            raise IndexError(
                f"row index must be between 0 and {self._height - 1}: {row}"
            )

    def _row(self, row: int) -> int:
        return row if self._origin_upper_left else self._height - row - 1

    def get_argb(self, col: int, row: int) -> int:
        self._validate(col, row)
        return self._pixels[self._row(row)][col]

    def set_argb(self, col: int, row: int, argb: int) -> None:
        self._validate(col, row)
        self._pixels[self._row(row)][col] = argb & 0xFFFFFFFF

    def get(self, col: int, row: int) -> RGBA:
        """Pixel as an (r, g, b, a) tuple."""
        argb = self.get_argb(col, row)
        return ((argb >> 16) & 0xFF, (argb >> 8) & 0xFF, argb & 0xFF, (argb >> 24) & 0xFF)

    def set(self, col: int, row: int, colour: RGBA) -> None:
        if colour is None:
            raise ValueError("colour argument is None")
        red, green, blue, alpha = colour
        self.set_argb(col, row, pack_argb(alpha, red, green, blue))

    def to_image(self) -> Image.Image:
        """In-memory Pillow RGBA image of the current pixels."""
        img = Image.new("RGBA", (self._width, self._height))
        img.putdata([
            ((argb >> 16) & 0xFF, (argb >> 8) & 0xFF, argb & 0xFF, (argb >> 24) & 0xFF)
            for row in self._pixels
            for argb in row
        ])
        return img

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if not isinstance(other, Picture):
            return NotImplemented
        if (self._width, self._height) != (other._width, other._height):
            return False
        return all(
            self.get_argb(col, row) == other.get_argb(col, row)
            for row in range(self._height)
            for col in range(self._width)
        )

    def __str__(self) -> str:
        lines = [f"{self._width}-by-{self._height} picture (RGB values given in hex)"]
        for row in range(self._height):
            lines.append(" ".join(
                f"#{self.get_argb(col, row) & 0xFFFFFF:06X}" for col in range(self._width)
            ))
        return "\n".join(lines)
