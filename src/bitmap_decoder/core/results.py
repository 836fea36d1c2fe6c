"""
Result objects for core operations.

Provides a unified result structure that the CLI (and any other front end)
can use to display operation outcomes consistently.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..pixel_grid import PixelGrid


@dataclass
class DecodeResult:
    """
    Unified result object for inspect/decode operations.

    Attributes:
        ok: Whether the operation completed successfully
        operation: Name of the operation (e.g., "inspect", "decode")
        source: Path or label of the input
        width: Image width in pixels
        height: Image height in pixels
        warnings: Non-blocking issues encountered
        errors: Blocking errors that caused failure
        metadata: Header fields and other operation-specific data
        logs: Captured log lines from the operation
        grid: Decoded pixels (decode only)
    """
    ok: bool
    operation: str
    source: str = ""
    width: int = 0
    height: int = 0
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    logs: List[str] = field(default_factory=list)
    grid: Optional[PixelGrid] = None

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def add_error(self, message: str) -> None:
        """Add an error message and mark result as failed."""
        self.errors.append(message)
        self.ok = False

    @property
    def partial(self) -> bool:
        """True if pixels were decoded but the stream stopped early."""
        return self.grid is not None and not self.grid.complete

    def to_summary(self) -> str:
        """
        Generate a human-readable summary string.

        Suitable for CLI output or simple logging.
        """
        status = "SUCCESS" if self.ok else "FAILED"
        if self.ok and self.partial:
            status = "PARTIAL"
        lines = [f"[{status}] {self.operation}"]

        if self.source:
            lines.append(f"  Source: {self.source}")
        if self.width or self.height:
            lines.append(f"  Size: {self.width}x{self.height}")

        if self.warnings:
            lines.append("  Warnings:")
            for warn in self.warnings:
                lines.append(f"    - {warn}")

        if self.errors:
            lines.append("  Errors:")
            for err in self.errors:
                lines.append(f"    - {err}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (pixels excluded)."""
        return {
            "ok": self.ok,
            "operation": self.operation,
            "source": self.source,
            "width": self.width,
            "height": self.height,
            "complete": None if self.grid is None else self.grid.complete,
            "warnings": self.warnings,
            "errors": self.errors,
            "metadata": self.metadata,
            "logs": self.logs,
        }

    @classmethod
    def success(
        cls,
        operation: str,
        source: str = "",
        width: int = 0,
        height: int = 0,
        **kwargs,
    ) -> "DecodeResult":
        """Create a successful result."""
        return cls(
            ok=True,
            operation=operation,
            source=source,
            width=width,
            height=height,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        operation: str,
        error: str,
        source: str = "",
        **kwargs,
    ) -> "DecodeResult":
        """Create a failed result."""
        result = cls(
            ok=False,
            operation=operation,
            source=source,
            **kwargs,
        )
        result.errors.append(error)
        return result
