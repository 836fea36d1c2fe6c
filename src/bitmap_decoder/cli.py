"""
Bitmap Decoder CLI

Inspect BMP headers, list palettes and decode pixels from the command line.
"""

import sys
import logging
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.logging import RichHandler

from bitmap_decoder.bitmap_image import BitmapImage
from bitmap_decoder.config import DecoderConfig
from bitmap_decoder.errors import BitmapError
from bitmap_decoder.picture import Picture
from bitmap_decoder.core.results import DecodeResult
from bitmap_decoder.core.actions import (
    inspect_bitmap as core_inspect_bitmap,
    decode_bitmap as core_decode_bitmap,
)
from bitmap_decoder.core.messages import (
    WarningItem,
    MessageLevel,
    result_to_warnings,
)

logger = logging.getLogger("bitmap_decoder")

# Setup Rich console
console = Console()

app = typer.Typer(help="🖼️  Bitmap Decoder - Windows BMP/DIB inspection and decoding")

_state = {"verbose": False}


def configure_logging(verbose: bool = False) -> None:
    """Route library logging through Rich on stderr; DEBUG when verbose."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )
    logger.setLevel(level)


@app.callback()
def _main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging and remediation hints"),
) -> None:
    _state["verbose"] = verbose
    configure_logging(verbose)


def print_header(text: str) -> None:
    """Print fancy header."""
    console.print(Panel(text, expand=False, style="bold blue"))


def print_success(text: str) -> None:
    """Print success message."""
    console.print(f"✓ {text}", style="green")


def print_warning(text: str) -> None:
    """Print warning message."""
    console.print(f"⚠️  {text}", style="yellow")


def print_error(text: str) -> None:
    """Print error message."""
    console.print(f"❌ {text}", style="red")


def print_structured_warning(warning: WarningItem, verbose: bool = False) -> None:
    """Print a structured warning with optional remediation."""
    if warning.level == MessageLevel.ERROR:
        style = "red"
        icon = "❌"
    elif warning.level == MessageLevel.WARN:
        style = "yellow"
        icon = "⚠️"
    else:
        style = "blue"
        icon = "ℹ️"

    console.print(f"{icon} [{warning.code.value}] {warning.title}", style=style)
    if verbose and warning.detail:
        console.print(f"   {warning.detail}", style="dim")
    if verbose and warning.remediation:
        console.print(f"   → {warning.remediation}", style="cyan")


def print_warnings_from_result(result: DecodeResult, verbose: bool = False) -> None:
    """Print all warnings and errors from a DecodeResult using structured format."""
    for warning in result_to_warnings(result):
        print_structured_warning(warning, verbose=verbose)


def require_file(path: str) -> Path:
    """Exit with an error line if ``path`` is not an existing file."""
    file_path = Path(path)
    if not file_path.is_file():
        print_error(f"File not found: {path}")
        sys.exit(1)
    return file_path


def load_image(path: str, config: Optional[DecoderConfig] = None) -> BitmapImage:
    """Parse a BMP file, converting parse failures into exit code 1."""
    file_path = require_file(path)
    try:
        return BitmapImage.from_path(file_path, config)
    except BitmapError as e:
        print_error(str(e))
        sys.exit(1)


def format_argb(argb: int) -> str:
    return f"#{argb:08X}"


def _echo_json(result: DecodeResult) -> None:
    typer.echo(json.dumps(result.to_dict(), indent=2))


@app.command()
def info(
    path: str = typer.Argument(..., help="Path to a .bmp file"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON for scripting"),
) -> None:
    """Show file and DIB header fields without decoding pixels."""
    require_file(path)
    result = core_inspect_bitmap(path)

    if output_json:
        _echo_json(result)
        if not result.ok:
            sys.exit(1)
        return

    print_header(f"Bitmap Info: {Path(path).name}")
    if not result.ok:
        print_warnings_from_result(result, verbose=_state["verbose"])
        sys.exit(1)

    table = Table(title="Headers")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for key, value in result.metadata.items():
        table.add_row(key, str(value))
    console.print(table)

    print_warnings_from_result(result, verbose=_state["verbose"])


@app.command()
def palette(
    path: str = typer.Argument(..., help="Path to a .bmp file"),
    limit: int = typer.Option(256, "--limit", "-n", help="Maximum entries to list"),
) -> None:
    """List colour palette entries of an indexed image."""
    image = load_image(path)

    if image.palette is None:
        print_warning(f"No colour palette ({image.bits_per_pixel} bpp image)")
        return

    table = Table(title=f"Palette ({len(image.palette)} entries)")
    table.add_column("#", style="dim")
    table.add_column("ARGB", style="cyan")
    table.add_column("R", style="red")
    table.add_column("G", style="green")
    table.add_column("B", style="blue")
    table.add_column("A", style="magenta")

    for index, argb in enumerate(image.palette):
        if index >= limit:
            break
        table.add_row(
            str(index),
            format_argb(argb),
            str((argb >> 16) & 0xFF),
            str((argb >> 8) & 0xFF),
            str(argb & 0xFF),
            str((argb >> 24) & 0xFF),
        )

    console.print(table)
    if image.palette.has_alpha_channel:
        console.print("[dim]Palette carries alpha values[/dim]")


@app.command()
def decode(
    path: str = typer.Argument(..., help="Path to a .bmp file"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON for scripting"),
    rgb32_alpha: bool = typer.Option(
        True, "--rgb32-alpha/--no-rgb32-alpha",
        help="Read the fourth byte of 32 bpp BI_RGB pixels as alpha",
    ),
) -> None:
    """Decode all pixels and report a summary."""
    require_file(path)
    config = DecoderConfig(rgb32_alpha=rgb32_alpha)
    result = core_decode_bitmap(path, config)

    if output_json:
        _echo_json(result)
        if not result.ok:
            sys.exit(1)
        return

    print_header(f"Decode: {Path(path).name}")
    if not result.ok:
        print_warnings_from_result(result, verbose=_state["verbose"])
        print_error("Decode FAILED")
        sys.exit(1)

    table = Table(title="Decoded Image")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Size", f"{result.width}x{result.height}")
    table.add_row("Bits per pixel", str(result.metadata["bits_per_pixel"]))
    table.add_row("Compression", result.metadata["compression"])
    table.add_row("Pixels", f"{result.metadata['pixel_count']:,}")
    table.add_row("Unique colours", str(result.metadata["unique_colours"]))
    table.add_row("Alpha channel", "Yes" if result.metadata["has_alpha_channel"] else "No")
    console.print(table)

    print_warnings_from_result(result, verbose=_state["verbose"])
    if result.partial:
        print_warning("Decode PARTIAL: pixel stream stopped early")
    else:
        print_success("Decode complete")


@app.command()
def pixel(
    path: str = typer.Argument(..., help="Path to a .bmp file"),
    x: int = typer.Argument(..., help="Column (0 = left)"),
    y: int = typer.Argument(..., help="Row (0 = top)"),
    rgb32_alpha: bool = typer.Option(
        True, "--rgb32-alpha/--no-rgb32-alpha",
        help="Read the fourth byte of 32 bpp BI_RGB pixels as alpha",
    ),
) -> None:
    """Print one decoded pixel."""
    image = load_image(path, DecoderConfig(rgb32_alpha=rgb32_alpha))
    if not (0 <= x < image.width and 0 <= y < max(image.height, 1)):
        print_error(f"Pixel ({x}, {y}) outside {image.width}x{image.height} image")
        sys.exit(1)

    try:
        grid = image.decode()
    except BitmapError as e:
        print_error(str(e))
        sys.exit(1)

    argb = grid.pixel(x, y)
    console.print(
        f"({x}, {y}) {format_argb(argb)} "
        f"r={(argb >> 16) & 0xFF} g={(argb >> 8) & 0xFF} b={argb & 0xFF} a={(argb >> 24) & 0xFF}"
    )


@app.command()
def dump(
    path: str = typer.Argument(..., help="Path to a .bmp file"),
    lower_left: bool = typer.Option(False, "--lower-left", help="Print rows bottom to top"),
) -> None:
    """Print every pixel as #RRGGBB, one row per line."""
    image = load_image(path)
    try:
        picture = Picture(image, title=path)
    except BitmapError as e:
        print_error(str(e))
        sys.exit(1)

    if lower_left:
        picture.set_origin_lower_left()
    typer.echo(str(picture))


def main() -> None:
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(0)
    except Exception as e:
        console.print(f"\n[red bold]Fatal error:[/red bold] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
