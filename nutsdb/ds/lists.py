"""In-memory list structure keyed by name, with optional expiry per key."""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator

from ..errors import NutsDBError

MIN_INT = -(1 << 63)
MAX_INT = (1 << 63) - 1


class ListNotFoundError(NutsDBError):
    """The list does not exist, has expired or is empty."""

    default_message = "the list not found"


class IndexOutOfRangeError(NutsDBError):
    """An index given to lset lies outside the list."""

    default_message = "index out of range"


class CountError(NutsDBError):
    """The count given to a removal is larger than the list."""

    default_message = "err count"


class MinIntError(NutsDBError):
    """The count given to a removal is the smallest integer and cannot be negated."""

    default_message = "err MinInt"


def _valid_indexes(items: list[bytes], indexes: Iterable[int]) -> Iterator[int]:
    """Yield the indexes that a removal by index acts on.

    Negative indexes and repeats of the previous index are skipped; the scan
    stops at the first index past the end of the list.
    """
    previous = -1
    for index in indexes:
        if index < 0 or index == previous:
            continue
        if index >= len(items):
            break
        yield index
        previous = index


class List:
    """Named lists of byte strings."""

    def __init__(self) -> None:
        self.items: dict[str, list[bytes]] = {}
        self.ttl: dict[str, int] = {}
        self.timestamp: dict[str, int] = {}

    def _require(self, key: str) -> list[bytes]:
        if self.is_expire(key) or key not in self.items:
            raise ListNotFoundError()
        return self.items[key]

    def is_expire(self, key: str) -> bool:
        """Return True if the list at ``key`` has expired; an expired list is dropped."""
        if key not in self.ttl:
            return False
        ttl = self.ttl[key]
        now = int(time.time())
        if ttl == 0 or ttl + self.timestamp.get(key, 0) > now:
            return False
        self.items.pop(key, None)
        self.ttl.pop(key, None)
        self.timestamp.pop(key, None)
        return True

    def size(self, key: str) -> int:
        """Number of elements in the list at ``key``."""
        return len(self._require(key))

    def is_empty(self, key: str) -> bool:
        """True if the list at ``key`` exists and holds no elements."""
        return self.size(key) == 0

    def rpeek(self, key: str) -> bytes:
        """Return the last element of the list."""
        items = self._require(key)
        if not items:
            raise ListNotFoundError()
        return items[-1]

    def rpop(self, key: str) -> bytes:
        """Remove and return the last element of the list."""
        item = self.rpeek(key)
        self.items[key] = self.items[key][:-1]
        return item

    def lpeek(self, key: str) -> bytes:
        """Return the first element of the list."""
        items = self._require(key)
        if not items:
            raise ListNotFoundError()
        return items[0]

    def lpop(self, key: str) -> bytes:
        """Remove and return the first element of the list."""
        item = self.lpeek(key)
        self.items[key] = self.items[key][1:]
        return item

    def rpush(self, key: str, *values: bytes) -> int:
        """Append ``values`` at the tail and return the new size."""
        if self.is_expire(key):
            raise ListNotFoundError()
        self.items.setdefault(key, []).extend(values)
        return len(self.items[key])

    def lpush(self, key: str, *values: bytes) -> int:
        """Insert ``values`` one by one at the head and return the new size."""
        if self.is_expire(key):
            raise ListNotFoundError()
        existing = self.items.get(key, [])
        self.items[key] = list(reversed(values)) + existing
        return len(self.items[key])

    def lrange(self, key: str, start: int, end: int) -> list[bytes]:
        """Return the elements from ``start`` to ``end`` inclusive; negative indexes count from the end."""
        size = self.size(key)
        if size == 0:
            return []
        if start >= 0 and end < 0:
            end += size
        elif start < 0 and end > 0:
            start += size
        elif start < 0 and end < 0:
            start += size
            end += size
        end = min(end, size - 1)
        if start > end or start < 0:
            raise ValueError("start or end error")
        return list(self.items[key][start : end + 1])

    def lrem_num(self, key: str, count: int, value: bytes) -> int:
        """Return how many elements equal to ``value`` a removal with ``count`` would take."""
        items = self._require(key)
        if count > len(items):
            raise CountError()
        if count < 0:
            if count == MIN_INT:
                raise MinIntError()
            count = -count
        removed = 0
        for item in items:
            if count > 0 and removed == count:
                break
            if item == value:
                removed += 1
        return removed

    def lrem(self, key: str, count: int, value: bytes) -> int:
        """Remove elements equal to ``value`` and return how many went.

        A positive ``count`` removes up to that many from the head, a negative
        one from the tail, and zero removes them all.
        """
        items = self._require(key)
        needed = self.lrem_num(key, count, value)
        if needed == 0:
            return 0
        if count == 0:
            count = needed
        limit = abs(count)
        ordered = items if count > 0 else reversed(items)
        removed = 0
        kept: list[bytes] = []
        for item in ordered:
            if removed < limit and item == value:
                removed += 1
            else:
                kept.append(item)
        if count < 0:
            kept.reverse()
        self.items[key] = kept
        return removed

    def lset(self, key: str, index: int, value: bytes) -> None:
        """Replace the element at ``index``."""
        items = self._require(key)
        if not 0 <= index < len(items):
            raise IndexOutOfRangeError()
        items[index] = value

    def ltrim(self, key: str, start: int, end: int) -> None:
        """Keep only the elements from ``start`` to ``end`` inclusive."""
        self._require(key)
        self.items[key] = self.lrange(key, start, end)

    def lrem_by_index(self, key: str, indexes: Iterable[int]) -> int:
        """Remove the elements at the given ascending indexes and return how many went."""
        items = self._require(key)
        indexes = list(indexes)
        if not indexes or not items:
            return 0
        drop = set(_valid_indexes(items, indexes))
        if not drop:
            return 0
        self.items[key] = [item for position, item in enumerate(items) if position not in drop]
        return len(drop)

    def lrem_by_index_pre_check(self, key: str, indexes: Iterable[int]) -> int:
        """Count the indexes that a removal by index would act on."""
        items = self._require(key)
        indexes = list(indexes)
        if not indexes or not items:
            return 0
        return sum(1 for _ in _valid_indexes(items, indexes))