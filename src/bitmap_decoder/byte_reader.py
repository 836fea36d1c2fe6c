"""Little-endian integer reads from a byte buffer with bounds checking."""

import struct
from typing import Type

from .errors import BitmapError, TruncatedBuffer


def ensure_available(
    data: bytes,
    offset: int,
    count: int,
    message: str = "",
    exc: Type[BitmapError] = TruncatedBuffer,
) -> None:
    """Raise ``exc`` unless ``count`` bytes can be read at ``offset``."""
    if offset < 0 or count < 0 or offset + count > len(data):
        raise exc(
            message
            or f"Need {count} bytes at offset {offset}, buffer has {len(data)}"
        )


def _unpack(fmt: str, data: bytes, offset: int) -> int:
    ensure_available(data, offset, struct.calcsize(fmt))
    return struct.unpack_from(fmt, data, offset)[0]


def read_u8(data: bytes, offset: int) -> int:
    return _unpack("<B", data, offset)


def read_u16(data: bytes, offset: int) -> int:
    return _unpack("<H", data, offset)


def read_i16(data: bytes, offset: int) -> int:
    return _unpack("<h", data, offset)


def read_u32(data: bytes, offset: int) -> int:
    return _unpack("<I", data, offset)


def read_i32(data: bytes, offset: int) -> int:
    return _unpack("<i", data, offset)
