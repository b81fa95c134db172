from __future__ import annotations

"""Hashed frequency container.

A chained hash table keyed by raw bytes with float counts.

  - ``increment_or_insert`` is the hot path and never raises on a missing key.
  - Growth is explicit: the slot array is a power of two (minimum 16) and
    doubles whenever the load factor passes 0.75 after an insert.
  - Sorted extraction has a deterministic tie order (value descending, then
    key ascending).
"""

from typing import Callable, Iterator, List, NamedTuple, Optional, Tuple, Union

from .errors import AllocationFailure, MapClearedError

DEFAULT_CAPACITY = 10
RESIZE_MIN = 16

_HASH_SEED = 5381
_WORD_MASK = (1 << 64) - 1

KeyLike = Union[bytes, bytearray, memoryview, str]


class Pair(NamedTuple):
    key: bytes
    value: float


def hash_key(key: bytes) -> int:
    """DJB2 over the raw bytes, wrapped to 64 bits."""
    h = _HASH_SEED
    for b in key:
        h = (h * 33 + b) & _WORD_MASK
    return h


def next_power_of_two(x: int) -> int:
    """Smallest power of two strictly greater than ``x``; 0 gives 1."""
    if x < 0:
        raise ValueError("x must be non-negative")
    return 1 << x.bit_length()


def next_size(x: int) -> int:
    return RESIZE_MIN if x < RESIZE_MIN else next_power_of_two(x)


def needs_resize(x: int) -> bool:
    # x is a power of two iff x and x-1 share no bits.
    return x >= RESIZE_MIN and not (x & (x - 1))


def _to_key(key: KeyLike) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8")
    return bytes(key)


class _Entry:
    __slots__ = ("key", "value")

    def __init__(self, key: bytes, value: float):
        self.key = key
        self.value = value


class _Bucket:
    __slots__ = ("entries", "capacity")

    def __init__(self):
        self.entries: List[_Entry] = []
        self.capacity = next_size(1)

    def find(self, key: bytes) -> Optional[_Entry]:
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    def append(self, key: bytes, value: float) -> None:
        n = len(self.entries)
        if needs_resize(n):
            self.capacity = next_size(n + 1)
        self.entries.append(_Entry(key, value))


class FrequencyMap:
    """Maps byte keys to accumulated float counts."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        self._slots: Optional[List[Optional[_Bucket]]] = None
        self._count = 0
        self.reset(capacity)

    # -------------------------
    # Lifecycle
    # -------------------------
    def reset(self, capacity: int = DEFAULT_CAPACITY) -> None:
        """(Re)initialize to an empty map with room for ``capacity`` slots."""
        if capacity < 0:
            raise ValueError("capacity must be non-negative")
        try:
            self._slots = [None] * next_size(capacity)
        except MemoryError as e:
            raise AllocationFailure(f"cannot allocate {capacity} slots") from e
        self._count = 0

    def clear(self) -> None:
        """Release all entries. The map is unusable until :meth:`reset`."""
        self._slots = None
        self._count = 0

    def _live_slots(self) -> List[Optional[_Bucket]]:
        if self._slots is None:
            raise MapClearedError("frequency map was cleared; call reset() first")
        return self._slots

    # -------------------------
    # Introspection
    # -------------------------
    @property
    def item_count(self) -> int:
        return self._count

    @property
    def slot_count(self) -> int:
        return len(self._live_slots())

    @property
    def load_factor(self) -> float:
        return self._count / self.slot_count

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        if self._slots is None:
            return "FrequencyMap(<cleared>)"
        body = ", ".join(f"{k.decode('latin-1')} => {v:.8f}" for k, v in self.items())
        return f"FrequencyMap({body})"

    # -------------------------
    # Lookup
    # -------------------------
    def _bucket_for(self, key: bytes) -> Tuple[int, Optional[_Bucket]]:
        slots = self._live_slots()
        i = hash_key(key) % len(slots)
        return i, slots[i]

    def _find(self, key: bytes) -> Optional[_Entry]:
        _, bucket = self._bucket_for(key)
        if bucket is None:
            return None
        return bucket.find(key)

    def get(self, key: KeyLike, default: Optional[float] = None) -> Optional[float]:
        entry = self._find(_to_key(key))
        return default if entry is None else entry.value

    def __getitem__(self, key: KeyLike) -> float:
        entry = self._find(_to_key(key))
        if entry is None:
            raise KeyError(key)
        return entry.value

    def exists(self, key: KeyLike) -> bool:
        return self._find(_to_key(key)) is not None

    __contains__ = exists

    # -------------------------
    # Mutation
    # -------------------------
    def _upsert(self, key: KeyLike, value: float, accumulate: bool) -> None:
        k = _to_key(key)
        value = float(value)
        i, bucket = self._bucket_for(k)
        if bucket is not None:
            entry = bucket.find(k)
            if entry is not None:
                if accumulate:
                    entry.value += value
                else:
                    entry.value = value
                return
        else:
            bucket = _Bucket()
            self._slots[i] = bucket

        bucket.append(k, value)
        self._count += 1
        if self._count * 100 > len(self._slots) * 75:
            self._resize()

    def put(self, key: KeyLike, value: float) -> None:
        self._upsert(key, value, accumulate=False)

    __setitem__ = put

    def increment_or_insert(self, key: KeyLike, delta: float) -> None:
        self._upsert(key, delta, accumulate=True)

    def merge(self, src: "FrequencyMap") -> None:
        """Add every entry of ``src`` into this map. ``src`` is left untouched."""
        for key, value in src.items():
            self.increment_or_insert(key, value)

    def _resize(self) -> None:
        old = self._live_slots()
        # Entries are unique in the old table, so put() preserves every value.
        fresh = FrequencyMap(len(old))
        try:
            for bucket in old:
                if bucket is None:
                    continue
                for entry in bucket.entries:
                    fresh.put(entry.key, entry.value)
        except MemoryError as e:
            raise AllocationFailure("cannot grow frequency map") from e
        self._slots = fresh._slots
        self._count = fresh._count

    # -------------------------
    # Iteration
    # -------------------------
    def items(self) -> Iterator[Tuple[bytes, float]]:
        for bucket in self._live_slots():
            if bucket is None:
                continue
            for entry in bucket.entries:
                yield entry.key, entry.value

    __iter__ = items

    def keys(self) -> Iterator[bytes]:
        for key, _ in self.items():
            yield key

    def for_each(self, f: Callable[[bytes, float], object]) -> object:
        """Call ``f(key, value)`` for every entry; a truthy return stops and is returned."""
        for key, value in self.items():
            ret = f(key, value)
            if ret:
                return ret
        return None

    def extract_sorted(self, limit: int = 0) -> List[Pair]:
        """Snapshot sorted by value descending, ties by key ascending."""
        pairs = [Pair(k, v) for k, v in self.items()]
        pairs.sort(key=lambda p: (-p.value, p.key))
        if limit > 0:
            del pairs[limit:]
        return pairs


def merge(dest: FrequencyMap, src: FrequencyMap) -> FrequencyMap:
    dest.merge(src)
    return dest
