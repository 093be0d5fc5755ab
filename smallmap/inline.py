"""A fixed-capacity open-addressing hash table kept in flat arrays.

The table stores at most ``capacity`` entries. Every slot has a control byte
(see :mod:`smallmap.group`). Lookups scan the control bytes group by group and
compare keys only where the secondary hash matches. Removed slots are marked
``DELETED`` and are reused by later inserts.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterator
from typing import Any, Optional

from .group import DELETED, EMPTY, BitMask, Group, h2, make_hash, tail_mask

__all__ = ["InlineTable"]

Hasher = Optional[Callable[[Hashable], int]]


class InlineTable:
    """A hash table of fixed capacity whose entries never move once placed."""

    __slots__ = ("_capacity", "_hasher", "_ctrl", "_slots", "_len")

    def __init__(self, capacity: int, hasher: Hasher = None) -> None:
        if capacity <= 0:
            raise ValueError("SmallMap cannot be initialized with zero size.")
        self._capacity = capacity
        self._hasher = hasher
        self._ctrl = bytearray([EMPTY]) * capacity
        self._slots: list[Optional[tuple[Any, Any]]] = [None] * capacity
        self._len = 0

    @property
    def capacity(self) -> int:
        """The number of entries the table can hold."""
        return self._capacity

    @property
    def hasher(self) -> Hasher:
        """The hash function used for keys, or ``None`` for built-in ``hash``."""
        return self._hasher

    def __len__(self) -> int:
        return self._len

    def __iter__(self) -> Iterator[Any]:
        for key, _ in self.items():
            yield key

    def __contains__(self, key: object) -> bool:
        return self.get_entry(key) is not None

    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {v!r}" for k, v in self.items())
        return f"{type(self).__name__}({self._capacity}, {{{body}}})"

    def is_empty(self) -> bool:
        """Whether the table holds no entries."""
        return self._len == 0

    def is_full(self) -> bool:
        """Whether every slot of the table is taken."""
        return self._len == self._capacity

    def get_entry(self, key: Hashable) -> Optional[tuple[Any, Any]]:
        """Return the stored ``(key, value)`` pair for ``key``, or ``None``."""
        if self.is_empty():
            return None
        index = self._find(make_hash(self._hasher, key), key)
        return None if index is None else self._slots[index]

    def insert(self, key: Hashable, value: Any) -> Optional[Any]:
        """Insert ``key`` with ``value``; return the value it replaced, if any.

        Raises :class:`OverflowError` if ``key`` is new and the table is full.
        """
        hash_value = make_hash(self._hasher, key)
        index, found = self._find_or_find_insert_slot(hash_value, key)
        if found:
            stored_key, old_value = self._slots[index]
            self._slots[index] = (stored_key, value)
            return old_value
        self._ctrl[index] = h2(hash_value)
        self._slots[index] = (key, value)
        self._len += 1
        return None

    def remove_entry(self, key: Hashable) -> Optional[tuple[Any, Any]]:
        """Remove ``key`` and return its ``(key, value)`` pair, or ``None``."""
        index = self._find(make_hash(self._hasher, key), key)
        if index is None:
            return None
        entry = self._slots[index]
        self._ctrl[index] = DELETED
        self._slots[index] = None
        self._len -= 1
        return entry

    def items(self) -> Iterator[tuple[Any, Any]]:
        """Yield the ``(key, value)`` pairs in slot order."""
        remaining = self._len
        offset = 0
        while remaining:
            for bit in Group.load(self._ctrl, offset).match_full():
                entry = self._slots[offset + bit]
                if entry is None:
                    continue
                yield entry
                remaining -= 1
                if not remaining:
                    return
            offset += Group.WIDTH
            if offset >= self._capacity:
                return

    def copy(self) -> InlineTable:
        """Return a shallow copy with the same layout and hasher."""
        twin = InlineTable(self._capacity, self._hasher)
        twin._ctrl = bytearray(self._ctrl)
        twin._slots = list(self._slots)
        twin._len = self._len
        return twin

    # -- probing ---------------------------------------------------------

    @staticmethod
    def _same(stored: Any, key: Any) -> bool:
        return stored is key or stored == key

    def _matching(self, matches: BitMask, offset: int, key: Any) -> Optional[int]:
        for bit in matches:
            index = offset + bit
            entry = self._slots[index]
            if entry is not None and self._same(entry[0], key):
                return index
        return None

    def _find(self, hash_value: int, key: Any) -> Optional[int]:
        tag = h2(hash_value)
        full_groups, remainder = divmod(self._capacity, Group.WIDTH)
        offset = 0
        for _ in range(full_groups):
            group = Group.load(self._ctrl, offset)
            index = self._matching(group.match_byte(tag), offset, key)
            if index is not None:
                return index
            offset += Group.WIDTH
        if remainder:
            group = Group.load(self._ctrl, offset)
            matches = group.match_byte(tag).masked(tail_mask(remainder))
            return self._matching(matches, offset, key)
        return None

    @staticmethod
    def _insert_slot_in_group(
        group: Group, offset: int, limit: Optional[int]
    ) -> Optional[int]:
        free = group.match_empty_or_deleted()
        if limit is not None:
            free = free.masked(limit)
        bit = free.lowest_set_bit()
        return None if bit is None else offset + bit

    def _find_or_find_insert_slot(self, hash_value: int, key: Any) -> tuple[int, bool]:
        tag = h2(hash_value)
        full_groups, remainder = divmod(self._capacity, Group.WIDTH)
        insert_slot: Optional[int] = None
        offset = 0
        for _ in range(full_groups):
            group = Group.load(self._ctrl, offset)
            index = self._matching(group.match_byte(tag), offset, key)
            if index is not None:
                return index, True
            if insert_slot is None:
                insert_slot = self._insert_slot_in_group(group, offset, None)
            # An EMPTY byte means no later group can hold the key.
            if group.match_empty().any_bit_set():
                break
            offset += Group.WIDTH
        if remainder:
            limit = tail_mask(remainder)
            group = Group.load(self._ctrl, offset)
            index = self._matching(group.match_byte(tag).masked(limit), offset, key)
            if index is not None:
                return index, True
            if insert_slot is None:
                insert_slot = self._insert_slot_in_group(group, offset, limit)
        if insert_slot is None:
            raise OverflowError(f"inline table is full ({self._capacity} entries)")
        return insert_slot, False