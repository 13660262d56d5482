"""Sorted set backed by a skip list, ordered by score and then by key."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional

SKIP_LIST_MAX_LEVEL = 32
SKIP_LIST_P = 0.25

_NO_LIMIT = (1 << 31) - 1


class _Level:
    """Forward link of a node at one level and the number of nodes it spans."""

    __slots__ = ("forward", "span")

    def __init__(self) -> None:
        self.forward: Optional[SortedSetNode] = None
        self.span = 0


@dataclass(eq=False)
class SortedSetNode:
    """A member of the sorted set: a unique key, its score and its value."""

    key: str
    score: float
    value: Optional[bytes] = None
    backward: Optional["SortedSetNode"] = field(default=None, repr=False)
    level: list[_Level] = field(default_factory=list, repr=False)

    @classmethod
    def _create(
        cls, levels: int, score: float, key: str, value: Optional[bytes]
    ) -> "SortedSetNode":
        return cls(key=key, score=score, value=value, level=[_Level() for _ in range(levels)])


@dataclass
class GetByScoreRangeOptions:
    """Options for a score range query.

    ``limit`` caps the number of nodes returned (0 means no cap); the exclude
    flags make the matching end of the interval open.
    """

    limit: int = 0
    exclude_start: bool = False
    exclude_end: bool = False


def _random_level() -> int:
    """Return a level between 1 and the maximum, higher levels being rarer."""
    level = 1
    while (random.getrandbits(31) & 0xFFFF) < SKIP_LIST_P * 0xFFFF:
        level += 1
    return min(level, SKIP_LIST_MAX_LEVEL)


class SortedSet:
    """Members with scores, kept in order of score and then key."""

    def __init__(self) -> None:
        self._header = SortedSetNode._create(SKIP_LIST_MAX_LEVEL, 0.0, "", None)
        self._tail: Optional[SortedSetNode] = None
        self._length = 0
        self._level = 1
        self.members: dict[str, SortedSetNode] = {}

    def __len__(self) -> int:
        return self._length

    def __contains__(self, key: object) -> bool:
        return key in self.members

    @staticmethod
    def _precedes(node: SortedSetNode, score: float, key: str) -> bool:
        return node.score < score or (node.score == score and node.key < key)

    def _insert_node(self, score: float, key: str, value: Optional[bytes]) -> SortedSetNode:
        update: list[SortedSetNode] = [self._header] * SKIP_LIST_MAX_LEVEL
        rank = [0] * SKIP_LIST_MAX_LEVEL

        x = self._header
        for i in range(self._level - 1, -1, -1):
            rank[i] = 0 if i == self._level - 1 else rank[i + 1]
            while (fwd := x.level[i].forward) is not None and self._precedes(fwd, score, key):
                rank[i] += x.level[i].span
                x = fwd
            update[i] = x

        level = _random_level()
        if level > self._level:
            for i in range(self._level, level):
                rank[i] = 0
                update[i] = self._header
                update[i].level[i].span = self._length
            self._level = level

        x = SortedSetNode._create(level, score, key, value)
        for i in range(level):
            own = x.level[i]
            before = update[i].level[i]
            own.forward = before.forward
            before.forward = x
            own.span = before.span - (rank[0] - rank[i])
            before.span = (rank[0] - rank[i]) + 1

        for i in range(level, self._level):
            update[i].level[i].span += 1

        x.backward = None if update[0] is self._header else update[0]
        if x.level[0].forward is not None:
            x.level[0].forward.backward = x
        else:
            self._tail = x

        self._length += 1
        return x

    def _delete_node(self, x: SortedSetNode, update: list[SortedSetNode]) -> None:
        for i in range(self._level):
            before = update[i].level[i]
            if before.forward is x:
                before.span += x.level[i].span - 1
                before.forward = x.level[i].forward
            else:
                before.span -= 1
        if x.level[0].forward is not None:
            x.level[0].forward.backward = x.backward
        else:
            self._tail = x.backward
        while self._level > 1 and self._header.level[self._level - 1].forward is None:
            self._level -= 1
        self._length -= 1
        self.members.pop(x.key, None)

    def _delete(self, score: float, key: str) -> bool:
        update: list[SortedSetNode] = [self._header] * SKIP_LIST_MAX_LEVEL
        x = self._header
        for i in range(self._level - 1, -1, -1):
            while (fwd := x.level[i].forward) is not None and self._precedes(fwd, score, key):
                x = fwd
            update[i] = x
        target = x.level[0].forward
        if target is not None and target.score == score and target.key == key:
            self._delete_node(target, update)
            return True
        return False

    def size(self) -> int:
        """Number of members."""
        return self._length

    def peek_min(self) -> Optional[SortedSetNode]:
        """The member with the lowest score, or None if the set is empty."""
        return self._header.level[0].forward

    def pop_min(self) -> Optional[SortedSetNode]:
        """Remove and return the member with the lowest score, or None."""
        x = self._header.level[0].forward
        if x is not None:
            self.remove(x.key)
        return x

    def peek_max(self) -> Optional[SortedSetNode]:
        """The member with the highest score, or None if the set is empty."""
        return self._tail

    def pop_max(self) -> Optional[SortedSetNode]:
        """Remove and return the member with the highest score, or None."""
        x = self._tail
        if x is not None:
            self.remove(x.key)
        return x

    def put(self, key: str, score: float, value: Optional[bytes]) -> None:
        """Insert ``key`` with ``score`` and ``value``, or update it if present."""
        existing = self.members.get(key)
        if existing is not None and existing.score == score:
            existing.value = value
            return
        if existing is not None:
            self._delete(existing.score, existing.key)
        self.members[key] = self._insert_node(score, key, value)

    def remove(self, key: str) -> Optional[SortedSetNode]:
        """Remove the member at ``key`` and return it, or None if absent."""
        found = self.members.get(key)
        if found is not None:
            self._delete(found.score, found.key)
        return found

    def get_by_score_range(
        self,
        start: float,
        end: float,
        options: Optional[GetByScoreRangeOptions] = None,
    ) -> list[SortedSetNode]:
        """Members whose score lies between ``start`` and ``end``.

        Without options the interval is closed and unlimited. If ``start`` is
        greater than ``end`` the members come in descending order.
        """
        limit = options.limit if options is not None and options.limit > 0 else _NO_LIMIT
        exclude_start = options is not None and options.exclude_start
        exclude_end = options is not None and options.exclude_end
        reverse = start > end
        if reverse:
            start, end = end, start
            exclude_start, exclude_end = exclude_end, exclude_start

        if self._length == 0:
            return []
        if reverse:
            return self._search_reverse(exclude_start, exclude_end, start, end, limit)
        return self._search_forward(exclude_start, exclude_end, start, end, limit)

    def _search_forward(
        self, exclude_start: bool, exclude_end: bool, start: float, end: float, limit: int
    ) -> list[SortedSetNode]:
        x = self._header
        for i in range(self._level - 1, -1, -1):
            while (fwd := x.level[i].forward) is not None and (
                fwd.score <= start if exclude_start else fwd.score < start
            ):
                x = fwd

        nodes: list[SortedSetNode] = []
        node = x.level[0].forward
        while node is not None and limit > 0:
            if (node.score >= end) if exclude_end else (node.score > end):
                break
            nodes.append(node)
            limit -= 1
            node = node.level[0].forward
        return nodes

    def _search_reverse(
        self, exclude_start: bool, exclude_end: bool, start: float, end: float, limit: int
    ) -> list[SortedSetNode]:
        x = self._header
        for i in range(self._level - 1, -1, -1):
            while (fwd := x.level[i].forward) is not None and (
                fwd.score < end if exclude_end else fwd.score <= end
            ):
                x = fwd

        nodes: list[SortedSetNode] = []
        node: Optional[SortedSetNode] = None if x is self._header else x
        while node is not None and limit > 0:
            if (node.score <= start) if exclude_start else (node.score < start):
                break
            nodes.append(node)
            limit -= 1
            node = node.backward
        return nodes

    def _sanitize_indexes(self, start: int, end: int) -> tuple[int, int]:
        if start < 0:
            start = self._length + start + 1
        if end < 0:
            end = self._length + end + 1
        return max(start, 1), max(end, 1)

    def get_by_rank_range(self, start: int, end: int, remove: bool = False) -> list[SortedSetNode]:
        """Members with 1-based ranks from ``start`` to ``end`` inclusive.

        Negative ranks count from the end (-1 is the last member). If
        ``start`` is greater than ``end`` the result is in reverse order. If
        ``remove`` is true the returned members are removed.
        """
        update: list[SortedSetNode] = [self._header] * SKIP_LIST_MAX_LEVEL
        start, end = self._sanitize_indexes(start, end)
        reverse = start > end
        if reverse:
            start, end = end, start

        traversed = 0
        x = self._header
        for i in range(self._level - 1, -1, -1):
            while x.level[i].forward is not None and traversed + x.level[i].span < start:
                traversed += x.level[i].span
                x = x.level[i].forward
            if remove:
                update[i] = x
            elif traversed + 1 == start:
                break

        traversed += 1
        nodes: list[SortedSetNode] = []
        node = x.level[0].forward
        while node is not None and traversed <= end:
            following = node.level[0].forward
            nodes.append(node)
            if remove:
                self._delete_node(node, update)
            traversed += 1
            node = following

        if reverse:
            nodes.reverse()
        return nodes

    def get_by_rank(self, rank: int, remove: bool = False) -> Optional[SortedSetNode]:
        """The member at 1-based ``rank``, or None; removed if ``remove`` is true."""
        nodes = self.get_by_rank_range(rank, rank, remove)
        return nodes[0] if len(nodes) == 1 else None

    def get_by_key(self, key: str) -> Optional[SortedSetNode]:
        """The member at ``key``, or None."""
        return self.members.get(key)

    def find_rank(self, key: str) -> int:
        """1-based rank of ``key`` in ascending order, or 0 if absent."""
        node = self.members.get(key)
        if node is None:
            return 0
        rank = 0
        x = self._header
        for i in range(self._level - 1, -1, -1):
            while (fwd := x.level[i].forward) is not None and (
                fwd.score < node.score or (fwd.score == node.score and fwd.key <= node.key)
            ):
                rank += x.level[i].span
                x = fwd
            if x is node:
                return rank
        return 0

    def find_rev_rank(self, key: str) -> int:
        """1-based rank of ``key`` in descending order, or 0 if absent."""
        if self._length == 0 or key not in self.members:
            return 0
        return self.size() - self.find_rank(key) + 1