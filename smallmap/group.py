"""Control-byte groups and bit masks used by the inline hash table.

A table keeps one control byte per slot. A byte is either ``EMPTY``,
``DELETED`` or a *full* marker holding the top seven bits of the key's hash.
Groups of ``Group.WIDTH`` control bytes are packed into one integer word and
scanned together with word-wide bit tricks.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterator
from dataclasses import dataclass
from typing import Optional

__all__ = [
    "BITMASK_MASK",
    "BITMASK_STRIDE",
    "DELETED",
    "EMPTY",
    "BitMask",
    "Group",
    "h2",
    "make_hash",
    "tail_mask",
]

#: Control byte value for an empty slot.
EMPTY = 0b1111_1111
#: Control byte value for a deleted slot.
DELETED = 0b1000_0000

_WORD_BITS = 64
_WORD_MASK = (1 << _WORD_BITS) - 1
_HASH_BYTES = 8

#: Number of bits per element in a bit mask.
BITMASK_STRIDE = 8
#: The bits of a word that carry match results: the high bit of each byte.
BITMASK_MASK = 0x8080_8080_8080_8080
_BITMASK_ITER_MASK = _WORD_MASK

_LOWEST_MASK = (
    0x0000_0000_0000_0000,
    0x0000_0000_0000_0080,
    0x0000_0000_0000_8080,
    0x0000_0000_0080_8080,
    0x0000_0000_8080_8080,
    0x0000_0080_8080_8080,
    0x0000_8080_8080_8080,
    0x0080_8080_8080_8080,
)


def _repeat(byte: int) -> int:
    """Replicate ``byte`` across every byte of a group word."""
    return int.from_bytes(bytes([byte]) * Group.WIDTH, "little")


@dataclass(frozen=True)
class BitMask:
    """Result of a match on a group; bit ``8*i+7`` marks slot ``i``."""

    word: int

    def invert(self) -> BitMask:
        """Return a mask with every element flipped."""
        return BitMask(self.word ^ BITMASK_MASK)

    def masked(self, word: int) -> BitMask:
        """Return the mask restricted to the bits set in ``word``."""
        return BitMask(self.word & word)

    def any_bit_set(self) -> bool:
        """Whether at least one element is set."""
        return self.word != 0

    def lowest_set_bit(self) -> Optional[int]:
        """Index of the first set element, or ``None`` if there is none."""
        if self.word == 0:
            return None
        trailing_zeros = (self.word & -self.word).bit_length() - 1
        return trailing_zeros // BITMASK_STRIDE

    def __iter__(self) -> Iterator[int]:
        word = self.word & _BITMASK_ITER_MASK
        while word:
            lowest = word & -word
            yield (lowest.bit_length() - 1) // BITMASK_STRIDE
            word ^= lowest


@dataclass(frozen=True)
class Group:
    """A word of ``WIDTH`` control bytes scanned in parallel."""

    word: int

    WIDTH = 8

    @classmethod
    def load(cls, ctrl: bytes | bytearray, offset: int = 0) -> Group:
        """Load ``WIDTH`` control bytes from ``ctrl`` starting at ``offset``.

        Bytes past the end of ``ctrl`` read as ``EMPTY``.
        """
        if offset < 0:
            raise ValueError(f"offset must not be negative, got {offset}")
        chunk = bytes(ctrl[offset:offset + cls.WIDTH])
        chunk += bytes([EMPTY]) * (cls.WIDTH - len(chunk))
        return cls(int.from_bytes(chunk, "little"))

    def match_byte(self, byte: int) -> BitMask:
        """Slots that *may* hold ``byte``.

        False positives are possible only for full bytes that differ from
        ``byte`` in their lowest bit, and only when there is a true match;
        key comparison weeds them out.
        """
        cmp = self.word ^ _repeat(byte)
        found = ((cmp - _repeat(0x01)) & ~cmp & _repeat(0x80)) & _WORD_MASK
        return BitMask(found)

    def match_empty(self) -> BitMask:
        """Slots that are ``EMPTY``."""
        return BitMask(self.word & (self.word << 1) & _repeat(0x80))

    def match_empty_or_deleted(self) -> BitMask:
        """Slots that are ``EMPTY`` or ``DELETED``."""
        return BitMask(self.word & _repeat(0x80))

    def match_full(self) -> BitMask:
        """Slots that hold an entry."""
        return self.match_empty_or_deleted().invert()


def h2(hash_value: int) -> int:
    """Secondary hash: the top seven bits of a 64-bit hash."""
    top7 = (hash_value & _WORD_MASK) >> (_HASH_BYTES * 8 - 7)
    return top7 & 0x7F


def tail_mask(remainder: int) -> int:
    """Mask keeping the first ``remainder`` slots of a partial group."""
    if not 0 <= remainder < Group.WIDTH:
        raise ValueError(
            f"remainder must be in range 0..{Group.WIDTH - 1}, got {remainder}"
        )
    return _LOWEST_MASK[remainder]


def make_hash(hasher: Optional[Callable[[Hashable], int]], key: Hashable) -> int:
    """Hash ``key`` with ``hasher`` (built-in ``hash`` if ``None``) to 64 bits."""
    raw = hash(key) if hasher is None else hasher(key)
    return raw & _WORD_MASK