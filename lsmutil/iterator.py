"""Value encoding and a merging iterator over sorted versioned-key iterators."""

from __future__ import annotations

import abc
import heapq
from dataclasses import dataclass

from lsmutil.errors import WrappedError
from lsmutil.keys import compare_keys

_MAX_VARINT_LEN = 10


def _size_varint(x: int) -> int:
    n = 1
    x >>= 7
    while x:
        n += 1
        x >>= 7
    return n


def _put_uvarint(x: int) -> bytes:
    out = bytearray()
    while x >= 0x80:
        out.append((x & 0x7F) | 0x80)
        x >>= 7
    out.append(x)
    return bytes(out)


def _uvarint(b: bytes) -> tuple[int, int]:
    x = 0
    shift = 0
    for i, byte in enumerate(b):
        if i == _MAX_VARINT_LEN:
            break
        if byte < 0x80:
            if i == _MAX_VARINT_LEN - 1 and byte > 1:
                break
            return x | (byte << shift), i + 1
        x |= (byte & 0x7F) << shift
        shift += 7
    else:
        raise ValueError("truncated varint")
    raise ValueError("varint overflows 64 bits")


@dataclass
class ValueStruct:
    """A value together with its internal and user metadata."""

    meta: int = 0
    user_meta: int = 0
    expires_at: int = 0
    value: bytes = b""
    version: int = 0  # not serialized

    def encoded_size(self) -> int:
        """Size in bytes of :meth:`encode`'s output, as a 16-bit count."""
        size = len(self.value) + 2
        if self.expires_at == 0:
            return (size + 1) & 0xFFFF
        return (size + _size_varint(self.expires_at)) & 0xFFFF

    @classmethod
    def decode(cls, b: bytes) -> ValueStruct:
        """Decode a value; everything after the header is the value."""
        if len(b) < 3:
            raise ValueError("encoded value is too short")
        expires_at, n = _uvarint(b[2:])
        return cls(meta=b[0], user_meta=b[1], expires_at=expires_at, value=bytes(b[2 + n:]))

    def encode(self) -> bytes:
        """Encode meta, user meta, varint expiry and the value bytes."""
        return bytes((self.meta, self.user_meta)) + _put_uvarint(self.expires_at) + bytes(self.value)


class Iterator(abc.ABC):
    """A cursor over versioned keys in sorted order."""

    @abc.abstractmethod
    def next(self) -> None:
        """Advance to the next entry."""

    @abc.abstractmethod
    def rewind(self) -> None:
        """Go back to the first entry."""

    @abc.abstractmethod
    def seek(self, key: bytes) -> None:
        """Move to the first entry at or past ``key``."""

    @abc.abstractmethod
    def key(self) -> bytes | None:
        """Return the current key."""

    @abc.abstractmethod
    def value(self) -> ValueStruct:
        """Return the current value."""

    @abc.abstractmethod
    def valid(self) -> bool:
        """Tell whether the cursor is on an entry."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the iterator's resources."""


class _Elem:
    __slots__ = ("itr", "nice", "reversed")

    def __init__(self, itr: Iterator, nice: int, reversed: bool) -> None:
        self.itr = itr
        self.nice = nice
        self.reversed = reversed

    def __lt__(self, other: _Elem) -> bool:
        cmp = compare_keys(self.itr.key(), other.itr.key())
        if cmp < 0:
            return not self.reversed
        if cmp > 0:
            return self.reversed
        # Equal keys: the iterator listed first wins.
        return self.nice < other.nice


class MergeIterator(Iterator):
    """Merges several iterators, yielding each key once from the earliest source.

    The merge iterator owns its iterators and closes them.
    """

    def __init__(self, iters: list[Iterator], reversed: bool) -> None:
        self._all = list(iters)
        self._reversed = reversed
        self._heap: list[_Elem] = []
        self._cur_key = b""
        self._init_heap()

    def _store_key(self, itr: Iterator) -> None:
        self._cur_key = bytes(itr.key())

    def _init_heap(self) -> None:
        self._heap = [
            _Elem(itr, nice, self._reversed) for nice, itr in enumerate(self._all) if itr.valid()
        ]
        heapq.heapify(self._heap)
        while self._heap:
            itr = self._heap[0].itr
            if itr is None or not itr.valid():
                heapq.heappop(self._heap)
                continue
            self._store_key(itr)
            break

    def valid(self) -> bool:
        return bool(self._heap) and self._heap[0].itr.valid()

    def key(self) -> bytes | None:
        if not self._heap:
            return None
        return self._heap[0].itr.key()

    def value(self) -> ValueStruct:
        if not self._heap:
            return ValueStruct()
        return self._heap[0].itr.value()

    def next(self) -> None:
        """Advance past the current key, skipping its duplicates in other sources."""
        if not self._heap:
            return
        smallest = self._heap[0].itr
        smallest.next()
        while self._heap:
            smallest = self._heap[0].itr
            if not smallest.valid():
                heapq.heappop(self._heap)
                continue
            heapq.heapreplace(self._heap, self._heap[0])
            smallest = self._heap[0].itr
            if smallest.valid():
                if smallest.key() != self._cur_key:
                    break
                smallest.next()
        if not smallest.valid():
            return
        self._store_key(smallest)

    def rewind(self) -> None:
        for itr in self._all:
            itr.rewind()
        self._init_heap()

    def seek(self, key: bytes) -> None:
        for itr in self._all:
            itr.seek(key)
        self._init_heap()

    def close(self) -> None:
        for itr in self._all:
            try:
                itr.close()
            except Exception as err:
                raise WrappedError("MergeIterator", err) from err