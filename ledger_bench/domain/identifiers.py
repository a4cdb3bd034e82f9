"""
Identifier helpers for the accounting engine.

Each run draws a fresh base offset so ids do not collide with accounts left
behind by earlier runs (the engine is never cleared). A 64-bit value is
rendered as a fixed-width 16-digit hex string and parsed into the engine's
128-bit id.
"""

from __future__ import annotations

import time
from typing import List, Optional

MAX_UINT64 = 2**64 - 1
RUN_BASE_MODULUS = 1_000_000_000
# Codes must fit the engine's 16-bit field.
CODE_MODULUS = 65535


def encode_id(value: int) -> str:
    """Render `value` as a zero-padded, lower-case, 16-digit hex string."""
    if not 0 <= value <= MAX_UINT64:
        raise ValueError(f"id {value} is outside the unsigned 64-bit range")
    return format(value, "016x")


def decode_id(text: str) -> int:
    """Parse a 16-digit hex id back into an integer."""
    if len(text) != 16:
        raise ValueError(f"expected 16 hex digits, got {len(text)}: {text!r}")
    return int(text, 16)


def to_uint128(value: int) -> int:
    """Convert a 64-bit value into the engine's 128-bit id via its hex form."""
    return int(encode_id(value), 16)


def category_code(index: int) -> int:
    return index % CODE_MODULUS


def run_base(now_ns: Optional[int] = None) -> int:
    """
    Derive the per-run base offset from the wall clock in nanoseconds.
    """
    if now_ns is None:
        now_ns = time.time_ns()
    return now_ns % RUN_BASE_MODULUS


def account_ids(base: int, count: int) -> List[int]:
    return [to_uint128(base + offset) for offset in range(count)]


__all__ = [
    "CODE_MODULUS",
    "MAX_UINT64",
    "RUN_BASE_MODULUS",
    "account_ids",
    "category_code",
    "decode_id",
    "encode_id",
    "run_base",
    "to_uint128",
]
