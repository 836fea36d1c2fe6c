"""
Core workflow actions.

Plain functions the CLI (or any other front end) calls to inspect and
decode bitmaps. Parse and decode failures are reported through the
returned DecodeResult instead of being raised.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from ..bitmap_image import BitmapImage
from ..config import DEFAULT_CONFIG, DecoderConfig
from ..constants import OPAQUE_ALPHA, Compression, compression_name
from ..errors import BitmapError
from .results import DecodeResult

logger = logging.getLogger(__name__)

Source = Union[str, Path, bytes, bytearray]

ALPHA_ASSUMED_MESSAGE = (
    "32 bpp BI_RGB image: the fourth byte of each pixel was read as alpha."
)


class _ListLogHandler(logging.Handler):
    """Capture log records into a list of formatted strings."""

    def __init__(self, level: int = logging.INFO) -> None:
        super().__init__(level)
        self.records = []
        self.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(self.format(record))


@contextmanager
def _capture_logs(logger_name: str = "bitmap_decoder"):
    """Capture logs for core operations into a list."""
    target_logger = logging.getLogger(logger_name)
    handler = _ListLogHandler()
    previous_level = target_logger.level
    if previous_level in (logging.NOTSET, logging.WARNING, logging.ERROR, logging.CRITICAL):
        target_logger.setLevel(logging.INFO)
    target_logger.addHandler(handler)
    try:
        yield handler.records
    finally:
        target_logger.removeHandler(handler)
        target_logger.setLevel(previous_level)


def _load(source: Source, config: DecoderConfig) -> Tuple[BitmapImage, str]:
    if isinstance(source, (bytes, bytearray)):
        return BitmapImage.from_bytes(bytes(source), config), "<bytes>"

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Bitmap not found: {source}")
    return BitmapImage.from_path(path, config), str(path)


def header_metadata(image: BitmapImage) -> Dict[str, Any]:
    """Header fields of an image as a JSON-friendly dict."""
    header = image.header
    metadata: Dict[str, Any] = {
        "file_size": image.size,
        "offset": image.offset,
        "data_offset": image.data_offset,
        "header_type": image.header_type.name,
        "header_size": image.header_size,
        "width": image.width,
        "height": image.height,
        "top_down": header.is_top_down,
        "colour_planes": image.colour_planes,
        "bits_per_pixel": image.bits_per_pixel,
        "compression": compression_name(image.compression),
        "image_data_size": image.image_data_size,
        "x_resolution": image.x_resolution,
        "y_resolution": image.y_resolution,
        "n_colours": image.n_colours,
        "important_colours": image.important_colours,
        "has_colour_palette": image.has_colour_palette,
    }

    if image.palette is not None:
        metadata["palette_entries"] = len(image.palette)
    if header.has_colour_masks:
        metadata["red_mask"] = f"0x{header.red_mask:08X}"
        metadata["green_mask"] = f"0x{header.green_mask:08X}"
        metadata["blue_mask"] = f"0x{header.blue_mask:08X}"
    if header.has_alpha_mask:
        metadata["alpha_mask"] = f"0x{header.alpha_mask:08X}"
    if header.cs_type is not None:
        metadata["cs_type"] = f"0x{header.cs_type:08X}"
        metadata["gamma"] = [header.gamma_red, header.gamma_green, header.gamma_blue]
    if header.profile_size is not None:
        metadata["intent"] = header.intent
        metadata["profile_data"] = header.profile_data
        metadata["profile_size"] = header.profile_size

    return metadata


def inspect_bitmap(
    source: Source,
    config: Optional[DecoderConfig] = None,
) -> DecodeResult:
    """
    Parse headers and palette without decoding pixels.

    Args:
        source: Path to a BMP file, or its bytes
        config: Decoder options

    Returns:
        DecodeResult with header fields in ``metadata``.

    Raises:
        FileNotFoundError: If ``source`` is a path that does not exist
    """
    config = config or DEFAULT_CONFIG
    label = source if isinstance(source, (str, Path)) else "<bytes>"

    with _capture_logs() as logs:
        try:
            image, label = _load(source, config)
        except BitmapError as e:
            logger.error(f"Inspect failed: {e}")
            return DecodeResult.failure("inspect", str(e), source=str(label), logs=list(logs))

        result = DecodeResult.success(
            "inspect",
            source=label,
            width=image.width,
            height=image.height,
            metadata=header_metadata(image),
        )

    result.logs = list(logs)
    return result


def decode_bitmap(
    source: Source,
    config: Optional[DecoderConfig] = None,
) -> DecodeResult:
    """
    Parse and decode a bitmap.

    Args:
        source: Path to a BMP file, or its bytes
        config: Decoder options

    Returns:
        DecodeResult with the pixel grid in ``grid``. A corrupted RLE8
        stream gives ``ok=True`` with ``partial`` set and a warning.

    Raises:
        FileNotFoundError: If ``source`` is a path that does not exist
    """
    config = config or DEFAULT_CONFIG
    label = source if isinstance(source, (str, Path)) else "<bytes>"

    with _capture_logs() as logs:
        try:
            image, label = _load(source, config)
            grid = image.decode()
            has_alpha = image.has_alpha_channel()
        except BitmapError as e:
            logger.error(f"Decode failed: {e}")
            return DecodeResult.failure("decode", str(e), source=str(label), logs=list(logs))

        metadata = header_metadata(image)
        colours = {argb for row in grid for argb in row}
        metadata.update({
            "pixel_count": grid.pixel_count(),
            "unique_colours": len(colours),
            "complete": grid.complete,
            "has_alpha_channel": has_alpha,
        })

        result = DecodeResult.success(
            "decode",
            source=label,
            width=grid.width,
            height=grid.height,
            metadata=metadata,
            grid=grid,
        )
        for message in grid.diagnostics:
            result.add_warning(message)

        translucent = any((argb >> 24) != OPAQUE_ALPHA for argb in colours)
        if (
            image.compression == Compression.BI_RGB
            and image.bits_per_pixel == 32
            and config.rgb32_alpha
            and translucent
        ):
            result.add_warning(ALPHA_ASSUMED_MESSAGE)

        logger.info(f"Decoded {label}: {grid.width}x{grid.height}, {len(colours)} colours")

    result.logs = list(logs)
    return result
