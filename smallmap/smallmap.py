"""A hash map that keeps a few entries in a fixed inline table.

A :class:`SmallMap` starts out backed by an :class:`~smallmap.inline.InlineTable`
holding at most ``inline_size`` entries. Inserting into a full inline table
moves every entry to an ordinary dictionary, and the map stays there until
:meth:`SmallMap.clear` brings it back to the inline form.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Iterator, Mapping, MutableMapping
from typing import Any, Optional, Union

from .inline import InlineTable

__all__ = ["SmallMap", "SIZE_HINT_LIMIT"]

Hasher = Optional[Callable[[Hashable], int]]

#: Upper bound on the capacity reserved from a mapping's length in ``from_mapping``.
SIZE_HINT_LIMIT = 4096


class SmallMap(MutableMapping):
    """A mapping stored inline up to ``inline_size`` entries, then in a dict."""

    __slots__ = ("_inline_size", "_hasher", "_inline", "_heap", "_reserved")

    def __init__(
        self,
        inline_size: int,
        data: Union[Mapping[Any, Any], Iterable[tuple[Any, Any]], None] = None,
        capacity: int = 0,
        hasher: Hasher = None,
    ) -> None:
        if inline_size <= 0:
            raise ValueError("SmallMap cannot be initialized with zero size.")
        if capacity < 0:
            raise ValueError(f"capacity must not be negative, got {capacity}")
        self._inline_size = inline_size
        self._hasher = hasher
        self._inline: Optional[InlineTable] = None
        self._heap: Optional[dict[Any, tuple[Any, Any]]] = None
        self._reserved = 0
        if capacity > inline_size:
            self._heap = {}
            self._reserved = capacity
        else:
            self._inline = InlineTable(inline_size, hasher)
        if data is not None:
            self.update(data)

    @classmethod
    def from_mapping(
        cls,
        inline_size: int,
        mapping: Union[Mapping[Any, Any], Iterable[tuple[Any, Any]]],
        hasher: Hasher = None,
    ) -> SmallMap:
        """Build a map from a mapping or pairs, reserving a cautious capacity."""
        hint = len(mapping) if hasattr(mapping, "__len__") else 0
        result = cls(inline_size, capacity=min(hint, SIZE_HINT_LIMIT), hasher=hasher)
        pairs = mapping.items() if isinstance(mapping, Mapping) else mapping
        for key, value in pairs:
            result.insert(key, value)
        return result

    # -- state -----------------------------------------------------------

    @property
    def inline_size(self) -> int:
        """The number of entries the inline table holds."""
        return self._inline_size

    def is_inline(self) -> bool:
        """Whether the entries live in the inline table."""
        return self._inline is not None

    def capacity(self) -> int:
        """A lower bound on the entries the map holds without moving them."""
        if self._inline is not None:
            return self._inline_size
        return max(self._reserved, len(self._heap))

    # -- mapping protocol ------------------------------------------------

    def __len__(self) -> int:
        if self._inline is not None:
            return len(self._inline)
        return len(self._heap)

    def __iter__(self) -> Iterator[Any]:
        if self._inline is not None:
            return iter(self._inline)
        return iter(self._heap)

    def __contains__(self, key: object) -> bool:
        return self.get_key_value(key) is not None

    def __getitem__(self, key: Any) -> Any:
        entry = self.get_key_value(key)
        if entry is None:
            raise KeyError(key)
        return entry[1]

    def __setitem__(self, key: Any, value: Any) -> None:
        self.insert(key, value)

    def __delitem__(self, key: Any) -> None:
        if self.remove_entry(key) is None:
            raise KeyError(key)

    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {v!r}" for k, v in self._pairs())
        return f"{type(self).__name__}({self._inline_size}, {{{body}}})"

    # -- operations ------------------------------------------------------

    def get_key_value(self, key: Any) -> Optional[tuple[Any, Any]]:
        """Return the stored ``(key, value)`` pair for ``key``, or ``None``."""
        if self._inline is not None:
            return self._inline.get_entry(key)
        return self._heap.get(key)

    def insert(self, key: Any, value: Any) -> Optional[Any]:
        """Insert ``key`` with ``value``; return the replaced value, if any.

        Inserting into a full inline table moves the entries to a dict first,
        even when ``key`` is already present.
        """
        if self._inline is not None:
            if not self._inline.is_full():
                return self._inline.insert(key, value)
            self._spill()
        previous = self._heap.get(key)
        if previous is None:
            self._heap[key] = (key, value)
            return None
        self._heap[key] = (previous[0], value)
        return previous[1]

    def remove(self, key: Any) -> Optional[Any]:
        """Remove ``key`` and return its value, or ``None`` if it is absent."""
        entry = self.remove_entry(key)
        return None if entry is None else entry[1]

    def remove_entry(self, key: Any) -> Optional[tuple[Any, Any]]:
        """Remove ``key`` and return its stored pair, or ``None`` if absent."""
        if self._inline is not None:
            return self._inline.remove_entry(key)
        return self._heap.pop(key, None)

    def clear(self) -> None:
        """Remove every entry and return to the inline form."""
        self._heap = None
        self._reserved = 0
        self._inline = InlineTable(self._inline_size, self._hasher)

    def copy(self) -> SmallMap:
        """Return a shallow copy in the same form as this map."""
        twin = SmallMap(self._inline_size, hasher=self._hasher)
        if self._inline is not None:
            twin._inline = self._inline.copy()
        else:
            twin._inline = None
            twin._heap = dict(self._heap)
            twin._reserved = self._reserved
        return twin

    def to_dict(self) -> dict[Any, Any]:
        """Return the entries as a plain dictionary."""
        return dict(self._pairs())

    # -- internals -------------------------------------------------------

    def _pairs(self) -> Iterator[tuple[Any, Any]]:
        if self._inline is not None:
            return self._inline.items()
        return iter(self._heap.values())

    def _spill(self) -> None:
        self._heap = {key: (key, value) for key, value in self._inline.items()}
        self._reserved = self._inline_size + 1
        self._inline = None