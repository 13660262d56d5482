"""In-memory set structure keyed by name."""

from __future__ import annotations

from typing import Optional

from ..errors import NutsDBError


class SetKeyNotFoundError(NutsDBError):
    """The set to remove members from does not exist."""

    default_message = "key not found"


class SetKeyNotExistError(NutsDBError):
    """A set named in the operation does not exist."""

    default_message = "key not exist"


class ItemEmptyError(NutsDBError):
    """No item was given to remove."""

    default_message = "item empty"


class Set:
    """Named sets of byte strings."""

    def __init__(self) -> None:
        self.m: dict[str, set[bytes]] = {}

    def _check_keys(self, key1: str, key2: str) -> None:
        if key1 not in self.m:
            raise SetKeyNotExistError("set1 is not exists")
        if key2 not in self.m:
            raise SetKeyNotExistError("set2 is not exists")

    def sadd(self, key: str, *items: bytes) -> None:
        """Add ``items`` to the set at ``key``, creating it if needed."""
        self.m.setdefault(key, set()).update(bytes(item) for item in items)

    def srem(self, key: str, *items: Optional[bytes]) -> None:
        """Remove ``items`` from the set at ``key``."""
        if key not in self.m:
            raise SetKeyNotFoundError()
        if not items or items[0] is None:
            raise ItemEmptyError()
        members = self.m[key]
        for item in items:
            members.discard(bytes(item or b""))

    def shas_key(self, key: str) -> bool:
        """True if a set exists at ``key``."""
        return key in self.m

    def spop(self, key: str) -> Optional[bytes]:
        """Remove and return an arbitrary member, or None if there is none."""
        members = self.m.get(key)
        if not members:
            return None
        return members.pop()

    def scard(self, key: str) -> int:
        """Number of members in the set at ``key``; 0 if it does not exist."""
        return len(self.m.get(key, ()))

    def sdiff(self, key1: str, key2: str) -> list[bytes]:
        """Members of the first set that are not in the second."""
        self._check_keys(key1, key2)
        other = self.m[key2]
        return [item for item in self.m[key1] if item not in other]

    def sinter(self, key1: str, key2: str) -> list[bytes]:
        """Members present in both sets."""
        self._check_keys(key1, key2)
        other = self.m[key2]
        return [item for item in self.m[key1] if item in other]

    def sunion(self, key1: str, key2: str) -> list[bytes]:
        """Members present in either set."""
        self._check_keys(key1, key2)
        first = self.m[key1]
        return list(first) + [item for item in self.m[key2] if item not in first]

    def sis_member(self, key: str, item: bytes) -> bool:
        """True if ``item`` is in the set at ``key``."""
        return bytes(item) in self.m.get(key, ())

    def sare_members(self, key: str, *items: bytes) -> bool:
        """True if every one of ``items`` is in the set at ``key``."""
        if key not in self.m:
            raise SetKeyNotExistError()
        members = self.m[key]
        return all(bytes(item) in members for item in items)

    def smembers(self, key: str) -> list[bytes]:
        """All members of the set at ``key``."""
        if key not in self.m:
            raise SetKeyNotExistError("set not exists")
        return list(self.m[key])

    def smove(self, key1: str, key2: str, item: bytes) -> bool:
        """Move ``item`` from the set at ``key1`` to the set at ``key2``."""
        if key1 not in self.m:
            raise SetKeyNotExistError("key1 is not exists")
        if key2 not in self.m:
            raise SetKeyNotExistError("key2 is not exists")
        item = bytes(item)
        self.m[key2].add(item)
        self.m[key1].discard(item)
        return True