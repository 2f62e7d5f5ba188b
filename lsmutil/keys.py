"""Versioned keys: a user key followed by an inverted big-endian timestamp."""

from __future__ import annotations

import struct

from lsmutil.errors import assert_true

_MAX_UINT64 = (1 << 64) - 1
_TS = struct.Struct(">Q")


def key_with_ts(key: bytes, ts: int) -> bytes:
    """Append ``ts`` to ``key`` so that newer versions sort first."""
    return bytes(key) + _TS.pack(_MAX_UINT64 - ts)


def parse_ts(key: bytes) -> int:
    """Return the timestamp stored in a versioned key, or 0 if it has none."""
    if len(key) <= 8:
        return 0
    return _MAX_UINT64 - _TS.unpack(key[-8:])[0]


def _cmp(a: bytes, b: bytes) -> int:
    return (a > b) - (a < b)


def compare_keys(key1: bytes, key2: bytes) -> int:
    """Compare versioned keys by user key first, then by timestamp suffix."""
    assert_true(len(key1) > 8 and len(key2) > 8)
    result = _cmp(key1[:-8], key2[:-8])
    if result:
        return result
    return _cmp(key1[-8:], key2[-8:])


def parse_key(key: bytes | None) -> bytes | None:
    """Strip the timestamp suffix from a versioned key."""
    if key is None:
        return None
    assert_true(len(key) > 8)
    return key[:-8]


def same_key(src: bytes, dst: bytes) -> bool:
    """Tell whether two versioned keys share the same user key."""
    if len(src) != len(dst):
        return False
    return parse_key(src) == parse_key(dst)


def fixed_duration(seconds: float) -> str:
    """Format a duration in seconds as hours, minutes and seconds."""
    text = f"{int(seconds) % 60:02d}s"
    if seconds >= 60:
        text = f"{int(seconds / 60) % 60:02d}m" + text
    if seconds >= 3600:
        text = f"{int(seconds / 3600):02d}h" + text
    return text