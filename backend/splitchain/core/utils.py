"""
Utility functions for the application.
"""
import re
from typing import Iterable, List

_ADDRESS_RE = re.compile(r"^0x[0-9a-f]{40}$")


def normalize_address(address: str) -> str:
    """Lower-case and validate a 0x-prefixed 20-byte address."""
    if not isinstance(address, str):
        raise ValueError(f"Address must be a string, got {type(address).__name__}")
    normalized = address.strip().lower()
    if not _ADDRESS_RE.match(normalized):
        raise ValueError(f"Invalid address: {address}")
    return normalized


def unique_in_order(addresses: Iterable[str]) -> List[str]:
    """Drop duplicates while keeping first-seen order."""
    seen = set()
    result = []
    for address in addresses:
        if address not in seen:
            seen.add(address)
            result.append(address)
    return result


def short_address(address: str) -> str:
    """Shorten an address for display (0x1234...abcd)."""
    return f"{address[:6]}...{address[-4:]}"
