"""Consistent hashing for percentage rollouts."""

from __future__ import annotations

_FNV32_OFFSET_BASIS = 0x811C9DC5
_FNV32_PRIME = 0x01000193
_MASK32 = 0xFFFFFFFF


def fnv1a_32(data: bytes) -> int:
    """Return the 32-bit FNV-1a hash of data."""
    h = _FNV32_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * _FNV32_PRIME) & _MASK32
    return h


def rollout_bucket(flag_key: str, user_id: int) -> int:
    """Return the stable 0-99 bucket of a user for a flag.

    The bucket depends only on the flag key and the decimal user id, so a user
    enabled at percentage P stays enabled at every P' > P.
    """
    return fnv1a_32(f"{flag_key}{user_id}".encode("utf-8")) % 100
