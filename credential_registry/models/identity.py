"""Caller identities.

Identities are 20-byte addresses written as ``0x`` plus 40 hex digits.
The registry compares them for equality only, so every identity entering
the service is normalized to lowercase at the boundary.
"""

from __future__ import annotations

import re

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_address(value: str) -> bool:
    return bool(_ADDRESS_RE.match(value))


def normalize_address(value: str) -> str:
    """Validate and lowercase an address.  Raises ValueError if malformed."""
    candidate = value.strip()
    if not is_address(candidate):
        raise ValueError(f"identity must be 0x followed by 40 hex digits (got {value!r})")
    return candidate.lower()
