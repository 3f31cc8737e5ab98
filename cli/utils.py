"""Utility functions for CLI operations."""

import re
import sys

from cli.constants import GREEN, RESET, SIZE_UNITS

SIZE_PATTERN = re.compile(r'^\s*(\d+)\s*([a-zA-Z]*)\s*$')


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    size = size_bytes / 1024.0
    for unit in ['KiB', 'MiB', 'GiB', 'TiB']:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def parse_size(text: str) -> int:
    """
    Parse a size such as ``5MiB``, ``512k`` or ``1048576`` into bytes.

    Raises:
        ValueError: If the text is not a size or the unit is unknown
    """
    match = SIZE_PATTERN.match(text)
    if not match:
        raise ValueError(f"Invalid size: {text!r}")

    number, unit = match.groups()
    multiplier = SIZE_UNITS.get(unit.lower() or 'b')
    if multiplier is None:
        raise ValueError(f"Unknown size unit: {unit!r}")
    return int(number) * multiplier


def print_progress(label: str, progress: int, done: int, total: int) -> None:
    """Rewrite the current terminal line with chunk progress."""
    sys.stdout.write(f"\r{label}: chunk {done}/{total} ({GREEN}{progress}%{RESET})")
    if done == total:
        sys.stdout.write('\n')
    sys.stdout.flush()
