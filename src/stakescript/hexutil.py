"""
Hex and file input helpers

- Parse hex with clear, field-named error messages.
- Read keys either from a hex flag or from a file holding the hex.
"""
from __future__ import annotations

import binascii
import re
from typing import Iterable, List, Optional


_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


def is_hex_str(s: str) -> bool:
    return bool(_HEX_RE.fullmatch(s or ""))


def parse_hex(name: str, s: Optional[str], length: Optional[int] = None) -> bytes:
    """Parse a hex string into bytes with optional fixed-length validation.

    Args:
        name: human-readable name for error messages.
        s: hex string (case-insensitive, even length, optional 0x prefix).
        length: expected length in bytes (optional). If set, enforce exact length.

    Returns:
        Decoded bytes.
    """
    if s is None:
        raise ValueError(f"{name} is required")
    s = s.strip()
    if s[:2].lower() == "0x":
        s = s[2:]
    if not is_hex_str(s) or len(s) % 2 != 0:
        raise ValueError(f"Invalid hex for {name}")
    try:
        b = binascii.unhexlify(s)
    except binascii.Error as exc:  # pragma: no cover - regex already guards
        raise ValueError(f"Invalid hex for {name}") from exc
    if length is not None and len(b) != length:
        raise ValueError(f"{name} must be {length} bytes (got {len(b)})")
    return b


def parse_hex_list(name: str, values: Iterable[str], length: Optional[int] = None) -> List[bytes]:
    """Parse each hex string of ``values``; errors name the failing index."""
    return [parse_hex(f"{name}[{i}]", v, length) for i, v in enumerate(values)]


def file_or_hex(name: str, hex_value: Optional[str], file_path: Optional[str], *, length: Optional[int] = None) -> bytes:
    """Read bytes from a hex string or a file containing hex.

    Precedence: hex_value if provided; otherwise file_path is used.
    Raises if neither is provided.
    """
    if hex_value:
        return parse_hex(name, hex_value, length)
    if file_path:
        with open(file_path, 'rt') as f:
            return parse_hex(name, f.read().strip(), length)
    raise ValueError(f"{name} required")
