"""BITMAPFILEHEADER parsing and image type detection."""

from dataclasses import dataclass
from enum import Enum

from .byte_reader import read_u16, read_u32
from .constants import (
    BMP_MAGIC,
    BF_OFFBITS_OFFSET,
    BF_RESERVED1_OFFSET,
    BF_RESERVED2_OFFSET,
    BF_SIZE_OFFSET,
    FILE_HEADER_SIZE,
)
from .errors import MalformedMagicNumber, TruncatedHeader


class ImageType(Enum):
    """Image container detected from the magic number."""
    BITMAP = "bitmap"
    UNDETERMINED = "undetermined"


def detect_type(data: bytes) -> ImageType:
    """Identify the image type from the leading magic bytes."""
    if data is None or len(data) < 2:
        return ImageType.UNDETERMINED
    if bytes(data[0:2]) == BMP_MAGIC:
        return ImageType.BITMAP
    return ImageType.UNDETERMINED


@dataclass(frozen=True)
class FileHeader:
    """The fixed 14-byte header at the start of every BMP file.

    ``pixel_data_offset`` is stored exactly as declared. It may be zero or
    point past the end of the buffer; the pixel decoder recomputes it from
    the header geometry in that case.
    """
    magic: bytes
    file_size: int
    reserved1: int
    reserved2: int
    pixel_data_offset: int

    @property
    def image_type(self) -> ImageType:
        return ImageType.BITMAP

    def offset_is_usable(self, buffer_length: int) -> bool:
        """True if the declared offset points inside a buffer of this length."""
        return 0 < self.pixel_data_offset < buffer_length

    @classmethod
    def from_bytes(cls, data: bytes) -> "FileHeader":
        """
        Parse bytes [0, 14).

        Raises:
            TruncatedHeader: If fewer than 14 bytes are available
            MalformedMagicNumber: If the file does not start with 'BM'
        """
        if detect_type(data) is not ImageType.BITMAP:
            raise MalformedMagicNumber(
                "Provided data is not a valid BMP image (magic number mismatch)."
            )
        if len(data) < FILE_HEADER_SIZE:
            raise TruncatedHeader(
                f"BMP file header needs {FILE_HEADER_SIZE} bytes, got {len(data)}"
            )

        return cls(
            magic=bytes(data[0:2]),
            file_size=read_u32(data, BF_SIZE_OFFSET),
            reserved1=read_u16(data, BF_RESERVED1_OFFSET),
            reserved2=read_u16(data, BF_RESERVED2_OFFSET),
            pixel_data_offset=read_u32(data, BF_OFFBITS_OFFSET),
        )
