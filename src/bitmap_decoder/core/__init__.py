"""
Core operations layer.

This module provides the single source of truth for:
- Result objects (results.py)
- Standardized warnings/messages (messages.py)
- Inspect/decode workflows (actions.py)

Front ends should call into this module rather than driving BitmapImage
directly, so failures and warnings are reported consistently.
"""

from .results import DecodeResult
from .messages import (
    MessageLevel,
    WarningCode,
    WarningItem,
    classify_message,
    warnings_from_strings,
    result_to_warnings,
)
from .actions import (
    header_metadata,
    inspect_bitmap,
    decode_bitmap,
)

__all__ = [
    # Results
    "DecodeResult",
    # Messages
    "MessageLevel",
    "WarningCode",
    "WarningItem",
    "classify_message",
    "warnings_from_strings",
    "result_to_warnings",
    # Actions
    "header_metadata",
    "inspect_bitmap",
    "decode_bitmap",
]
