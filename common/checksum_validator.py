"""SHA-256 checksum helpers for chunk payloads."""

import hashlib
from typing import Optional


def compute_checksum(data: bytes) -> str:
    """
    Compute SHA-256 checksum for a chunk payload.

    Args:
        data: Chunk bytes

    Returns:
        Hexadecimal SHA-256 digest
    """
    return hashlib.sha256(data).hexdigest()


def verify_checksum(data: bytes, expected: Optional[str]) -> bool:
    """
    Check a chunk payload against a declared checksum.

    An absent checksum is treated as nothing to verify.

    Args:
        data: Chunk bytes
        expected: Declared SHA-256 digest (hex), compared case-insensitively

    Returns:
        True if the checksum matches or none was declared
    """
    if not expected:
        return True
    return compute_checksum(data) == expected.strip().lower()
