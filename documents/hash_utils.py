from __future__ import annotations

import hashlib
from typing import Any, Set

import orjson


def sha1_bytes(b: bytes) -> str:
    return hashlib.sha1(b).hexdigest()


_INT64_MIN, _UINT64_MAX = -(2**63), 2**64 - 1


def _widen_ints(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _widen_ints(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_widen_ints(v) for v in value]
    if (
        isinstance(value, int)
        and not isinstance(value, bool)
        and not _INT64_MIN <= value <= _UINT64_MAX
    ):
        return orjson.Fragment(str(value))
    return value


def dumps_compact(value: Any) -> bytes:
    """
    Compact JSON, keys in insertion order. Integers outside the 64-bit range
    are written as raw digits instead of failing the whole encode.
    """
    try:
        return orjson.dumps(value)
    except orjson.JSONEncodeError:
        return orjson.dumps(_widen_ints(value))


def sha1_json(value: Any) -> str:
    """SHA-1 of the compact JSON form of `value`, keys in insertion order."""
    return sha1_bytes(dumps_compact(value))


class KeyAllocator:
    """
    Hands out short `_key` values derived from content hashes.

    A key is the first `length` hex chars of the content's SHA-1. When a
    prefix has already been handed out, the allocator appends a counter shared
    by all prefixes (first collision -> "<hash>1", next -> "<hash>2", ...).
    Uniqueness only holds within one allocator, so build one per run.
    """

    def __init__(self, length: int = 8):
        self.length = length
        self._seen: Set[str] = set()
        self._tie_breaker = 0

    def allocate(self, item: Any) -> str:
        base = sha1_json(item)[: self.length]
        if base in self._seen:
            self._tie_breaker += 1
            return f"{base}{self._tie_breaker}"
        self._seen.add(base)
        return base
