"""Utility modules for bundlecop."""

from .console import (
    _rich_success,
    _rich_error,
    _rich_warning,
    _rich_info,
    _rich_muted,
    _rich_echo,
    _rich_panel,
    _create_files_table,
    _print_files,
    _get_console,
    STATUS_SYMBOLS
)

__all__ = [
    '_rich_success',
    '_rich_error',
    '_rich_warning',
    '_rich_info',
    '_rich_muted',
    '_rich_echo',
    '_rich_panel',
    '_create_files_table',
    '_print_files',
    '_get_console',
    'STATUS_SYMBOLS'
]
