"""Utility functions."""

from .terminal import (
    console,
    create_table,
    format_banner,
    format_verdict_color,
    print_output,
)

__all__ = [
    "console",
    "create_table",
    "format_banner",
    "format_verdict_color",
    "print_output",
]
