"""
Standardized warning and message system.

Provides structured warning items with stable codes so every front end
reports decoder conditions the same way.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List


class MessageLevel(Enum):
    """Severity level for messages."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class WarningCode(Enum):
    """Stable warning codes for known conditions."""
    # Layout warnings
    W_OFFSET_RECOMPUTED = "W_OFFSET_RECOMPUTED"

    # RLE8 stream warnings
    W_RLE_CORRUPTED = "W_RLE_CORRUPTED"
    W_RLE_UNTERMINATED = "W_RLE_UNTERMINATED"

    # Pixel interpretation
    W_ALPHA_ASSUMED = "W_ALPHA_ASSUMED"

    # Decode failures
    W_UNSUPPORTED_COMPRESSION = "W_UNSUPPORTED_COMPRESSION"
    W_UNSUPPORTED_BIT_DEPTH = "W_UNSUPPORTED_BIT_DEPTH"
    W_PALETTE_INDEX = "W_PALETTE_INDEX"
    W_MALFORMED_FILE = "W_MALFORMED_FILE"

    # Generic
    W_UNKNOWN = "W_UNKNOWN"


WARNING_REMEDIATIONS: Dict[WarningCode, str] = {
    WarningCode.W_OFFSET_RECOMPUTED:
        "The file header's pixel-data offset was unusable. Re-save the file to fix its header.",
    WarningCode.W_RLE_CORRUPTED:
        "The RLE8 stream is truncated. Rows after the failure point are left blank.",
    WarningCode.W_RLE_UNTERMINATED:
        "The RLE8 stream has no end-of-bitmap marker. The file may be cut short.",
    WarningCode.W_ALPHA_ASSUMED:
        "Use --no-rgb32-alpha if the fourth byte of each pixel is padding.",
    WarningCode.W_UNSUPPORTED_COMPRESSION:
        "Convert the image to BI_RGB, BI_BITFIELDS or BI_RLE8 with another tool.",
    WarningCode.W_UNSUPPORTED_BIT_DEPTH:
        "The bit depth does not match the compression method.",
    WarningCode.W_PALETTE_INDEX:
        "A pixel refers to a colour the palette does not define.",
    WarningCode.W_MALFORMED_FILE:
        "The file is not a readable BMP. Check it was not truncated or renamed.",
    WarningCode.W_UNKNOWN:
        "Run with --verbose for more details.",
}


@dataclass
class WarningItem:
    """
    Structured warning message with stable code.

    Attributes:
        level: Severity (INFO, WARN, ERROR)
        code: Stable warning code for programmatic handling
        title: Short, user-facing title
        detail: Longer explanation of the issue
        remediation: Suggested action to resolve the issue
    """
    level: MessageLevel
    code: WarningCode
    title: str
    detail: str = ""
    remediation: str = ""

    def __post_init__(self):
        """Set default remediation if not provided."""
        if not self.remediation and self.code in WARNING_REMEDIATIONS:
            self.remediation = WARNING_REMEDIATIONS[self.code]

    @classmethod
    def info(cls, code: WarningCode, title: str, detail: str = "") -> "WarningItem":
        return cls(MessageLevel.INFO, code, title, detail)

    @classmethod
    def warn(cls, code: WarningCode, title: str, detail: str = "") -> "WarningItem":
        return cls(MessageLevel.WARN, code, title, detail)

    @classmethod
    def error(cls, code: WarningCode, title: str, detail: str = "") -> "WarningItem":
        return cls(MessageLevel.ERROR, code, title, detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON/display."""
        return {
            "level": self.level.value,
            "code": self.code.value,
            "title": self.title,
            "detail": self.detail,
            "remediation": self.remediation,
        }


def classify_message(message: str) -> WarningCode:
    """Map a plain decoder message to a stable warning code."""
    msg_lower = message.lower()

    if "offset" in msg_lower and "computed from header" in msg_lower:
        return WarningCode.W_OFFSET_RECOMPUTED
    if "palette index" in msg_lower:
        return WarningCode.W_PALETTE_INDEX
    if "bits per pixel" in msg_lower:
        return WarningCode.W_UNSUPPORTED_BIT_DEPTH
    if "rle8" in msg_lower and "end-of-bitmap" in msg_lower:
        return WarningCode.W_RLE_UNTERMINATED
    if "rle8" in msg_lower:
        return WarningCode.W_RLE_CORRUPTED
    if "alpha" in msg_lower and "32 bpp" in msg_lower:
        return WarningCode.W_ALPHA_ASSUMED
    if "compression" in msg_lower:
        return WarningCode.W_UNSUPPORTED_COMPRESSION
    if any(word in msg_lower for word in ("bmp", "header", "magic", "palette", "pixel data")):
        return WarningCode.W_MALFORMED_FILE
    return WarningCode.W_UNKNOWN


def warnings_from_strings(
    warning_strings: List[str],
    default_level: MessageLevel = MessageLevel.WARN,
) -> List[WarningItem]:
    """Convert plain warning strings to WarningItem list."""
    return [
        WarningItem(level=default_level, code=classify_message(msg), title=msg)
        for msg in warning_strings
    ]


def result_to_warnings(result: "DecodeResult") -> List[WarningItem]:
    """
    Convert a result's warnings and errors to WarningItem list.

    Args:
        result: DecodeResult from core operations

    Returns:
        List of WarningItem objects
    """
    items = warnings_from_strings(result.warnings, MessageLevel.WARN)
    items.extend(
        WarningItem.error(classify_message(err), err) for err in result.errors
    )
    return items
