import pytest
from hypothesis import given
from hypothesis import strategies as st

from smallmap.group import (
    BITMASK_MASK,
    DELETED,
    EMPTY,
    BitMask,
    Group,
    h2,
    make_hash,
    tail_mask,
)

control_byte = st.one_of(
    st.just(EMPTY), st.just(DELETED), st.integers(min_value=0, max_value=0x7F)
)
control_bytes = st.lists(control_byte, min_size=Group.WIDTH, max_size=Group.WIDTH)


def test_control_constants():
    assert EMPTY == 0b1111_1111
    assert DELETED == 0b1000_0000
    group = Group.load(bytes([EMPTY, DELETED, 0x00]))
    assert list(group.match_empty()) == [0] + list(range(3, Group.WIDTH))
    assert list(group.match_empty_or_deleted()) == [0, 1] + list(range(3, Group.WIDTH))
    assert list(group.match_full()) == [2]


def test_empty_group_matches():
    group = Group.load(bytes([EMPTY]) * Group.WIDTH)
    assert list(group.match_empty()) == list(range(Group.WIDTH))
    assert list(group.match_empty_or_deleted()) == list(range(Group.WIDTH))
    assert list(group.match_full()) == []


def test_deleted_is_not_empty():
    ctrl = bytearray([EMPTY] * Group.WIDTH)
    ctrl[2] = DELETED
    ctrl[5] = 0x11
    group = Group.load(ctrl)
    assert 2 not in list(group.match_empty())
    assert 2 in list(group.match_empty_or_deleted())
    assert list(group.match_full()) == [5]


def test_short_ctrl_is_padded_with_empty():
    group = Group.load(bytes([0x01, 0x02]))
    assert list(group.match_full()) == [0, 1]
    assert list(group.match_empty()) == list(range(2, Group.WIDTH))


def test_load_with_offset():
    ctrl = bytes([EMPTY] * Group.WIDTH + [0x33] + [EMPTY] * (Group.WIDTH - 1))
    assert list(Group.load(ctrl, Group.WIDTH).match_byte(0x33)) == [0]
    assert list(Group.load(ctrl, 0).match_byte(0x33)) == []


def test_load_negative_offset():
    with pytest.raises(ValueError):
        Group.load(b"\x00", -1)


@given(control_bytes, st.integers(min_value=0, max_value=0x7F))
def test_match_byte_finds_all_true_matches(ctrl, byte):
    found = set(Group.load(bytes(ctrl)).match_byte(byte))
    truth = {i for i, c in enumerate(ctrl) if c == byte}
    assert truth <= found
    if not truth:
        assert found == set()
    for i in found - truth:
        assert ctrl[i] ^ byte == 1


@given(control_bytes)
def test_match_partitions(ctrl):
    group = Group.load(bytes(ctrl))
    full = set(group.match_full())
    free = set(group.match_empty_or_deleted())
    empty = set(group.match_empty())
    assert full | free == set(range(Group.WIDTH))
    assert not full & free
    assert empty == {i for i, c in enumerate(ctrl) if c == EMPTY}
    assert full == {i for i, c in enumerate(ctrl) if c < 0x80}


def test_bitmask_lowest_set_bit():
    assert BitMask(0).lowest_set_bit() is None
    assert not BitMask(0).any_bit_set()
    group = Group.load(bytes([EMPTY, EMPTY, 0x05, EMPTY, 0x05]))
    mask = group.match_byte(0x05)
    assert mask.any_bit_set()
    assert mask.lowest_set_bit() == 2
    assert list(mask) == [2, 4]


@given(st.integers(min_value=0, max_value=BITMASK_MASK))
def test_invert_is_involution(word):
    mask = BitMask(word & BITMASK_MASK)
    assert mask.invert().invert() == mask
    assert mask.invert().masked(mask.word) == BitMask(0)


def test_tail_mask_values():
    assert tail_mask(0) == 0
    assert tail_mask(3) == 0x0000_0000_0080_8080
    assert tail_mask(7) == 0x0080_8080_8080_8080


@pytest.mark.parametrize("remainder", range(Group.WIDTH))
def test_tail_mask_keeps_leading_slots(remainder):
    full = Group.load(bytes(Group.WIDTH)).match_full()
    assert list(full.masked(tail_mask(remainder))) == list(range(remainder))


@pytest.mark.parametrize("remainder", [-1, Group.WIDTH])
def test_tail_mask_out_of_range(remainder):
    with pytest.raises(ValueError):
        tail_mask(remainder)


def test_h2_top_bits():
    assert h2(0) == 0
    assert h2(0xFFFF_FFFF_FFFF_FFFF) == 0x7F


@given(st.integers(min_value=0, max_value=2**64 - 1), st.integers(min_value=0, max_value=2**57 - 1))
def test_h2_ignores_low_bits(hash_value, low):
    result = h2(hash_value)
    assert 0 <= result <= 0x7F
    assert h2(hash_value ^ low) == result


def test_make_hash_with_custom_hasher():
    assert make_hash(lambda key: 42, "anything") == 42
    assert make_hash(lambda key: -1, "anything") == 0xFFFF_FFFF_FFFF_FFFF


@given(st.one_of(st.integers(), st.text()))
def test_make_hash_default_is_stable_and_bounded(key):
    first = make_hash(None, key)
    assert 0 <= first < 2**64
    assert make_hash(None, key) == first