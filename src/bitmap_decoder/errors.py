"""Exception hierarchy for bitmap parsing and decoding."""


class BitmapError(ValueError):
    """Base exception for all bitmap parse and decode errors"""
    pass


class TruncatedBuffer(BitmapError):
    """A read ran past the end of the buffer"""
    pass


class MalformedMagicNumber(BitmapError):
    """File does not start with the 'BM' signature"""
    pass


class UnknownHeaderSize(BitmapError):
    """DIB header size does not match any known variant"""

    def __init__(self, header_size: int):
        self.header_size = header_size
        super().__init__(f"Unknown DIB header size: {header_size}")


class TruncatedHeader(BitmapError):
    """Buffer too short for the file header or declared DIB header"""
    pass


class PaletteTruncated(BitmapError):
    """Colour palette runs past the end of the buffer"""
    pass


class UnsupportedForHeaderType(BitmapError):
    """Field is not defined for the active DIB header variant"""

    def __init__(self, field_name: str, header_type: str):
        self.field_name = field_name
        self.header_type = header_type
        super().__init__(f"No {field_name} for image with {header_type} header")


class DecodeError(BitmapError):
    """Base class for errors raised while reconstructing pixels"""
    pass


class UnsupportedCompression(DecodeError):
    """Compression method is not decoded by this library"""

    def __init__(self, compression: int, message: str = ""):
        self.compression = compression
        super().__init__(message or f"Unsupported BMP compression type: {compression}")


class UnsupportedBitDepth(DecodeError):
    """Bit depth is not valid for the compression method"""

    def __init__(self, bits_per_pixel: int, message: str = ""):
        self.bits_per_pixel = bits_per_pixel
        super().__init__(message or f"Unsupported bits per pixel: {bits_per_pixel}")


class PaletteIndexOutOfRange(DecodeError):
    """Pixel references a palette entry that does not exist"""

    def __init__(self, index: int, size: int, position: str = ""):
        self.index = index
        self.size = size
        where = f" at pixel {position}" if position else ""
        super().__init__(f"Palette index {index} out of bounds [0, {size - 1}]{where}")


class CorruptedImage(DecodeError):
    """Pixel data is missing or malformed"""
    pass
