"""
BI_RLE8 run-length decoder.

The stream is a sequence of two-byte commands:

    NN CC       encoded run: NN copies of palette index CC (NN > 0)
    00 00       end of line: column back to 0, next row
    00 01       end of bitmap: stop
    00 02 DX DY delta: move the cursor right DX and down DY, no pixels written
    00 NN ...   absolute run: NN explicit palette indices (NN > 2), padded
                to an even byte count

Rows are counted from the first stored row, which is the bottom display row
for a bottom-up image. Writes outside the image are dropped. A truncated
stream stops the decode and keeps whatever was written so far.
"""

from enum import Enum
from typing import List, Optional
import logging

from .byte_reader import ensure_available
from .errors import CorruptedImage
from .palette import ColourPalette
from .pixel_grid import RowMapping

logger = logging.getLogger(__name__)

ESCAPE = 0x00
ESC_END_OF_LINE = 0x00
ESC_END_OF_BITMAP = 0x01
ESC_DELTA = 0x02

UNTERMINATED_MESSAGE = "RLE8 stream ended before the end-of-bitmap marker."


class RleState(Enum):
    """State after the most recent command."""
    RUNNING = "running"
    END_OF_LINE = "end_of_line"
    END_OF_BITMAP = "end_of_bitmap"
    DELTA = "delta"
    ABSOLUTE_RUN = "absolute_run"


class Rle8Decoder:
    """
    Cursor-driven BI_RLE8 decoder.

    Example:
        decoder = Rle8Decoder(data, offset, width, height, mapping, palette)
        rows = decoder.run(rows)
        if not decoder.complete:
            print(decoder.error)
    """

    def __init__(
        self,
        data: bytes,
        start: int,
        width: int,
        height: int,
        mapping: RowMapping,
        palette: ColourPalette,
    ):
        self.data = data
        self.offset = start
        self.width = width
        self.height = height
        self.mapping = mapping
        self.palette = palette
        self.x = 0
        self.y = 0
        self.state = RleState.RUNNING
        self.complete = False
        self.error: Optional[str] = None

    def _target_row(self, rows: List[List[int]]) -> Optional[List[int]]:
        if not 0 <= self.y < self.height:
            return None
        row = self.mapping.display_row(self.y)
        if not 0 <= row < len(rows):
            return None
        return rows[row]

    def _write_encoded_run(self, rows: List[List[int]], count: int, index: int) -> None:
        colour = self.palette.colour(index)
        target = self._target_row(rows)
        if target is not None:
            start = max(self.x, 0)
            end = min(self.x + count, self.width)
            if end > start:
                target[start:end] = [colour] * (end - start)
        self.x += count

    def _write_absolute_run(self, rows: List[List[int]], count: int) -> None:
        target = self._target_row(rows)
        for i in range(count):
            if target is not None and 0 <= self.x < self.width:
                target[self.x] = self.palette.colour(self.data[self.offset + i])
            self.x += 1

    def _read_byte(self, message: str) -> int:
        ensure_available(self.data, self.offset, 1, message, CorruptedImage)
        value = self.data[self.offset]
        self.offset += 1
        return value

    def step(self, rows: List[List[int]]) -> RleState:
        """
        Consume one command from the stream and apply it to ``rows``.

        Raises:
            CorruptedImage: If the command's parameters are cut off
        """
        run_length = self._read_byte("RLE8 decoding error: Missing run length.")

        if run_length != ESCAPE:
            index = self._read_byte(
                "RLE8 decoding error: Missing colour index for encoded run."
            )
            self._write_encoded_run(rows, run_length, index)
            self.state = RleState.RUNNING
            return self.state

        code = self._read_byte("RLE8 decoding error: Missing escape code parameter.")

        if code == ESC_END_OF_LINE:
            self.x = 0
            self.y += 1
            self.state = RleState.END_OF_LINE
        elif code == ESC_END_OF_BITMAP:
            self.state = RleState.END_OF_BITMAP
        elif code == ESC_DELTA:
            ensure_available(
                self.data,
                self.offset,
                2,
                "RLE8 decoding error: Missing delta offsets (x, y).",
                CorruptedImage,
            )
            self.x += self.data[self.offset]
            self.y += self.data[self.offset + 1]
            self.offset += 2
            self.state = RleState.DELTA
        else:
            ensure_available(
                self.data,
                self.offset,
                code,
                f"RLE8 decoding error: Not enough data for absolute run of {code} pixels.",
                CorruptedImage,
            )
            self._write_absolute_run(rows, code)
            # Absolute runs are word aligned
            self.offset += code + (code & 1)
            self.state = RleState.ABSOLUTE_RUN

        return self.state

    def run(self, rows: List[List[int]]) -> List[List[int]]:
        """
        Decode until end of bitmap or until the stream gives out.

        Corruption is not raised: the rows decoded so far are returned,
        ``complete`` stays False and ``error`` holds the reason.
        """
        try:
            while self.state is not RleState.END_OF_BITMAP:
                # Every command needs at least two bytes
                if self.offset + 1 >= len(self.data):
                    self.error = UNTERMINATED_MESSAGE
                    logger.warning(self.error)
                    return rows
                self.step(rows)
        except CorruptedImage as e:
            self.error = str(e)
            logger.error(self.error)
            return rows

        self.complete = True
        return rows
