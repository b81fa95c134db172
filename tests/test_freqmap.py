import pytest

from freqstat.errors import MapClearedError
from freqstat.freqmap import (
    RESIZE_MIN,
    FrequencyMap,
    Pair,
    _Bucket,
    hash_key,
    merge,
    needs_resize,
    next_power_of_two,
    next_size,
)


def test_put_overwrites():
    m = FrequencyMap()
    m.put("hello", 1)
    m.put("hello", 3)
    assert m.get("hello") == 3
    assert m.item_count == 1


def test_increment_accumulates():
    m = FrequencyMap()
    m.increment_or_insert("world", 5)
    m.increment_or_insert("world", 5)
    assert m.get(b"world") == 10
    m.increment_or_insert("world", -2.5)
    assert m["world"] == 7.5


def test_missing_key_is_distinct_from_zero():
    m = FrequencyMap()
    assert m.get("nope") is None
    assert not m.exists("nope")
    assert "nope" not in m
    with pytest.raises(KeyError):
        m["nope"]

    m.put("zero", 0)
    m.put("neg", -1)
    assert m.get("zero") == 0.0
    assert m.exists("zero")
    assert m.get("neg") == -1.0


def test_hash_is_djb2():
    assert hash_key(b"") == 5381
    assert hash_key(b"a") == 5381 * 33 + ord("a")
    assert hash_key(b"ab") == (5381 * 33 + ord("a")) * 33 + ord("b")


def test_hash_wraps_to_64_bits():
    assert hash_key(b"x" * 200) < 2**64


def test_growth_helpers():
    assert next_power_of_two(10) == 16
    assert next_power_of_two(16) == 32
    assert next_power_of_two(0) == 1
    assert next_size(3) == RESIZE_MIN
    assert next_size(16) == 32
    assert needs_resize(16)
    assert needs_resize(64)
    assert not needs_resize(8)
    assert not needs_resize(17)


def test_initial_slot_count():
    assert FrequencyMap().slot_count == 16
    assert FrequencyMap(0).slot_count == 16
    assert FrequencyMap(100).slot_count == 128


def test_load_factor_bound_and_item_count():
    m = FrequencyMap()
    for i in range(1000):
        m.increment_or_insert(f"k{i}", 1)
        assert m.load_factor <= 0.75
    for i in range(500):
        m.increment_or_insert(f"k{i}", 1)
    assert m.item_count == 1000
    assert len(m) == 1000
    assert m.slot_count == 2048
    assert m.get("k0") == 2
    assert m.get("k999") == 1


def test_rehash_preserves_values():
    m = FrequencyMap()
    expected = {f"key-{i}".encode(): i * 0.25 for i in range(200)}
    for k, v in expected.items():
        m.put(k, v)
    assert dict(m.items()) == expected


def test_key_is_copied():
    m = FrequencyMap()
    key = bytearray(b"abc")
    m.put(key, 1)
    key[0] = ord("z")
    assert m.exists(b"abc")
    assert not m.exists(b"zbc")


def test_many_keys_in_one_bucket():
    m = FrequencyMap(256)
    slots = m.slot_count
    # Keys that all land in slot 0; more than RESIZE_MIN of them forces bucket growth.
    keys = []
    i = 0
    while len(keys) < 40:
        k = f"c{i}".encode()
        if hash_key(k) % slots == 0:
            keys.append(k)
        i += 1
    for n, k in enumerate(keys):
        m.put(k, n)
    assert m.slot_count == slots
    for n, k in enumerate(keys):
        assert m.get(k) == n
    bucket = m._slots[0]
    assert len(bucket.entries) == 40
    assert bucket.capacity == 64


def test_bucket_capacity_doubles_at_powers_of_two():
    b = _Bucket()
    seen = []
    for n in range(70):
        b.append(f"k{n}".encode(), 1.0)
        assert len(b.entries) <= b.capacity
        seen.append(b.capacity)
    assert seen[:16] == [16] * 16
    assert seen[16:32] == [32] * 16
    assert seen[32:64] == [64] * 32
    assert seen[64:] == [128] * 6


def test_merge_sums_and_leaves_src_alone():
    dest = FrequencyMap()
    dest.put("a", 1)
    dest.put("b", 2)
    src = FrequencyMap()
    src.put("b", 3)
    src.put("c", 4)

    merge(dest, src)

    assert dict(dest.items()) == {b"a": 1, b"b": 5, b"c": 4}
    assert dict(src.items()) == {b"b": 3, b"c": 4}


def test_for_each_stops_early():
    m = FrequencyMap()
    for k in "abcdef":
        m.put(k, 1)
    seen = []

    def visit(key, value):
        seen.append(key)
        if len(seen) == 3:
            return "stop"
        return 0

    assert m.for_each(visit) == "stop"
    assert len(seen) == 3
    assert m.for_each(lambda k, v: 0) is None


def test_extract_sorted_order_and_ties():
    m = FrequencyMap()
    m.put("b", 2)
    m.put("a", 2)
    m.put("c", 5)
    m.put("d", -1)
    assert m.extract_sorted() == [
        Pair(b"c", 5.0),
        Pair(b"a", 2.0),
        Pair(b"b", 2.0),
        Pair(b"d", -1.0),
    ]
    assert [p.key for p in m.extract_sorted(limit=2)] == [b"c", b"a"]


def test_extract_sorted_is_a_snapshot():
    m = FrequencyMap()
    m.put("x", 1)
    pairs = m.extract_sorted()
    m.increment_or_insert("x", 10)
    m.put("y", 100)
    assert pairs == [Pair(b"x", 1.0)]


def test_clear_then_reset_is_fresh():
    m = FrequencyMap()
    for i in range(100):
        m.put(str(i), i)
    m.clear()
    with pytest.raises(MapClearedError):
        m.get("1")
    with pytest.raises(MapClearedError):
        m.put("1", 1)

    m.reset()
    fresh = FrequencyMap()
    assert m.item_count == fresh.item_count == 0
    assert m.slot_count == fresh.slot_count
    assert list(m.items()) == []
    assert m.get("1") is None
