"""Console utility functions for formatting and output."""

from typing import List, Optional

import click
from colorama import Fore, Style, init
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models import FileReading

init(autoreset=True)


# Status symbols for consistent iconography
STATUS_SYMBOLS = {
    'success': '✔',
    'info': '•',
    'warning': '⚠',
    'error': '✗',
    'skip': '↷',
    'list': '•',
}

_console = None


def _get_console() -> Optional[Console]:
    """Get the shared Rich console instance."""
    global _console
    if _console is None:
        try:
            _console = Console()
        except Exception:
            return None
    return _console


def _rich_echo(message: str, color: str = "white", style: str = None, bold: bool = False, symbol: str = None):
    """Echo message with Rich formatting or colorama fallback."""
    if style is not None:
        color = style

    if symbol and symbol in STATUS_SYMBOLS:
        message = f"{STATUS_SYMBOLS[symbol]} {message}"

    console = _get_console()
    if console:
        try:
            style_str = f"bold {color}" if bold else color
            console.print(message, style=style_str, highlight=False, markup=False)
            return
        except Exception:
            pass

    color_map = {
        'red': Fore.RED,
        'green': Fore.GREEN,
        'yellow': Fore.YELLOW,
        'blue': Fore.BLUE,
        'cyan': Fore.CYAN,
        'white': Fore.WHITE,
        'magenta': Fore.MAGENTA,
        'muted': Fore.WHITE,
        'dim': Fore.WHITE,
    }
    color_code = color_map.get(color, Fore.WHITE)
    style_code = Style.BRIGHT if bold else ""
    click.echo(f"{color_code}{style_code}{message}{Style.RESET_ALL}")


def _rich_success(message: str, symbol: str = None):
    """Display success message with green color and bold styling."""
    _rich_echo(message, color="green", symbol=symbol, bold=True)


def _rich_error(message: str, symbol: str = None):
    """Display error message with red color."""
    _rich_echo(message, color="red", symbol=symbol)


def _rich_warning(message: str, symbol: str = None):
    """Display warning message with yellow color."""
    _rich_echo(message, color="yellow", symbol=symbol)


def _rich_info(message: str, symbol: str = None):
    """Display info message with blue color."""
    _rich_echo(message, color="blue", symbol=symbol)


def _rich_muted(message: str):
    _rich_echo(message, color="dim")


def _rich_panel(content: str, title: str = None, style: str = "cyan"):
    """Display content in a Rich panel with fallback."""
    console = _get_console()
    if console:
        try:
            console.print(Panel(content, title=title, border_style=style))
            return
        except Exception:
            pass

    if title:
        click.echo(f"\n--- {title} ---")
    click.echo(content)
    if title:
        click.echo("-" * (len(title) + 8))


def format_size(size: Optional[int]) -> str:
    """Human readable byte size."""
    if size is None:
        return "-"
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KiB"
    return f"{size / (1024 * 1024):.2f} MiB"


def _create_files_table(files: List[FileReading], title: str = "Files") -> Table:
    """Create a Rich table of measured files."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Name", style="bold white")
    table.add_column("Hash", style="yellow")
    table.add_column("Size", style="white", justify="right")
    table.add_column("Gzip", style="green", justify="right")

    for reading in files:
        table.add_row(
            reading.name,
            reading.hash or "-",
            format_size(reading.raw_size),
            format_size(reading.gzip_size),
        )
    return table


def _print_files(files: List[FileReading], title: str = "Files"):
    """Print measured files as a table, or as plain lines without Rich."""
    console = _get_console()
    if console:
        try:
            console.print(_create_files_table(files, title))
            return
        except Exception:
            pass

    click.echo(f"{title}:")
    for reading in files:
        click.echo(f"  {reading.name}  {format_size(reading.raw_size)}  ({format_size(reading.gzip_size)} gzip)")
