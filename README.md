# smallmap

`smallmap` provides `SmallMap`, a mutable mapping that stores up to a fixed
number of entries in an inline, open-addressed table of control bytes and
slots. When the inline table is full and another insert arrives, the map
moves every entry into an ordinary `dict` and keeps working from there. This
happens even if the key being inserted is already present. `clear()` brings
the map back to its inline form.

## Installation

```
pip install smallmap
```

## Usage

```python
from smallmap.smallmap import SmallMap

m = SmallMap(16)
m.insert("hello", "world")          # returns the previous value, or None
m["hello2"] = "world2"

assert m["hello"] == "world"
assert len(m) == 2
assert m.remove_entry("hello") == ("hello", "world")
assert m.remove("hello2") == "world2"
assert m.is_inline()
```

Growing past the inline size switches to the dict form:

```python
m = SmallMap(8)
for i in range(16):
    m[i] = i * 2
assert not m.is_inline()
assert m.capacity() >= 16

m.clear()
assert m.is_inline()
assert len(m) == 0
```

## API

- `SmallMap(inline_size, data=None, capacity=0, hasher=None)`: if `capacity`
  is bigger than `inline_size`, the map starts in dict form. `data` is a
  mapping or an iterable of pairs to load. `hasher` is a callable that maps a
  key to an integer and is used by the inline table. It defaults to the
  built-in `hash`. An `inline_size` of zero or less, or a negative
  `capacity`, raises `ValueError`.
- `SmallMap.from_mapping(inline_size, mapping, hasher=None)` builds a map from
  a mapping or pairs. It reserves capacity for the mapping's length, capped at
  `SIZE_HINT_LIMIT` (4096).
- `insert(key, value)` returns the replaced value or `None`.
  `remove(key)` returns the removed value or `None`.
  `remove_entry(key)` and `get_key_value(key)` return the stored
  `(key, value)` pair or `None`.
- `is_inline()`, `capacity()` and the `inline_size` property describe the
  current form.
- `copy()` returns a shallow copy in the same form. `to_dict()` returns the
  entries as a plain `dict`.

`SmallMap` is a `collections.abc.MutableMapping`, so `get`, `items`, `pop`,
`update` and the `in` operator work as they do on `dict`. Indexing a missing
key and deleting one both raise `KeyError`. In inline form, iteration follows
slot order, which is not always insertion order.

The lower layers are public as well:

- `smallmap.group` has the control-byte matching: `Group`, `BitMask`, `h2`,
  `tail_mask`, `make_hash`, and the `EMPTY` and `DELETED` markers.
- `smallmap.inline` has `InlineTable`, the fixed-capacity table. Inserting a
  new key into a full `InlineTable` raises `OverflowError`.

## What it does not do

`smallmap` is a library only. It has no command-line tool. It also has no
serialisation format of its own: use `to_dict()` or `from_mapping()` to move
data in and out.