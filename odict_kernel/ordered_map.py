"""
Ordered Map Kernel -- OrderedMap Core

An associative container that is at the same time a position-indexed
sequence and a unique-key lookup table.

Storage:
  - _keys / _values   positionally aligned parallel lists (equal length)
  - _index            key -> position, O(1) key access
  - _version          bumped by exactly one per structural mutation
                      (insert of a new key, remove, clear, move, reload);
                      untouched by in-place value replacement
  - _report           integrity findings of the last reconciliation
  - _surplus_keys /   unpaired tail of the longer persisted sequence;
    _surplus_values   not entries, re-emitted by to_persisted()

Dead entries: data loaded from persisted form may hold None keys or
repeated keys. Those entries stay visible by position but are never
reachable through the lookup index. Explicit mutation calls reject None
and duplicate keys outright.

Single-threaded, synchronous use only. No locking.
"""

from __future__ import annotations

from typing import (
    Any, Dict, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar,
)

from .cursor import MapCursor
from .errors import DuplicateKeyError, IndexOutOfRangeError, NullKeyError
from .reconcile import ReconcileReport, is_indexable_key, reconcile
from .views import KeyView, ValueView

K = TypeVar("K")
V = TypeVar("V")

NOT_FOUND: int = -1


class OrderedMap(Generic[K, V]):
    """
    Ordered key/value container addressable by unique key and by
    zero-based position.

    Iterating the map yields ``(key, value)`` tuples through a versioned
    MapCursor; any structural mutation during the iteration makes the
    next step raise CollectionModifiedError.
    """

    def __init__(
        self,
        entries: Optional[Iterable[Tuple[K, V]]] = None,
        suppress_errors: bool = False,
    ) -> None:
        self._keys: List[Any] = []
        self._values: List[Any] = []
        self._index: Dict[Any, int] = {}
        self._version: int = 0
        self._report: ReconcileReport = ReconcileReport()
        self._surplus_keys: List[Any] = []
        self._surplus_values: List[Any] = []

        # Display-only: hosts hide integrity warnings when set.
        # Reconciliation runs regardless.
        self.suppress_errors: bool = suppress_errors

        self._key_view: KeyView = KeyView(self)
        self._value_view: ValueView = ValueView(self)

        if entries is not None:
            for key, value in entries:
                self.add(key, value)

    # ------------------------------------------------------------------
    # Construction from persisted form
    # ------------------------------------------------------------------

    @classmethod
    def from_persisted(
        cls,
        keys: Sequence[Any],
        values: Sequence[Any],
        suppress_errors: bool = False,
    ) -> "OrderedMap[K, V]":
        """Build a map from two raw persisted sequences (see load_persisted)."""
        omap: OrderedMap[K, V] = cls(suppress_errors=suppress_errors)
        omap.load_persisted(keys, values)
        return omap

    def load_persisted(self, keys: Sequence[Any], values: Sequence[Any]) -> ReconcileReport:
        """
        Replace the contents with two raw persisted sequences.

        Never raises for malformed data: mismatched lengths, None keys and
        duplicate keys are reported through ``integrity`` instead.
        Counts as one structural mutation.
        """
        state = reconcile(keys, values)
        self._keys = state.keys
        self._values = state.values
        self._index = state.index
        self._report = state.report
        self._surplus_keys = state.surplus_keys
        self._surplus_values = state.surplus_values
        self._version += 1
        return self._report

    def to_persisted(self) -> Tuple[List[Any], List[Any]]:
        """
        Copies of the key and value sequences in current order.

        An unpaired tail seen at the last load is appended back, so a
        load followed by to_persisted() loses nothing.
        """
        return (
            self._keys + self._surplus_keys,
            self._values + self._surplus_values,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        return self._version

    @property
    def count(self) -> int:
        return len(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def index_of(self, key: Any) -> int:
        """Position of *key*, or -1 when it is not reachable by key."""
        if not is_indexable_key(key):
            return NOT_FOUND
        return self._index.get(key, NOT_FOUND)

    def contains_key(self, key: Any) -> bool:
        """False for keys that can never be indexed (None, unhashable)."""
        if not is_indexable_key(key):
            return False
        return key in self._index

    __contains__ = contains_key

    def get_key_at(self, index: int) -> K:
        self._check_index(index)
        return self._keys[index]

    def get_value_at(self, index: int) -> V:
        self._check_index(index)
        return self._values[index]

    def entry_at(self, index: int) -> Tuple[K, V]:
        self._check_index(index)
        return (self._keys[index], self._values[index])

    def __getitem__(self, key: K) -> V:
        if not is_indexable_key(key) or key not in self._index:
            raise KeyError(key)
        return self._values[self._index[key]]

    def get(self, key: Any, default: Any = None) -> Any:
        pos = self.index_of(key)
        if pos == NOT_FOUND:
            return default
        return self._values[pos]

    def index_of_entry(self, key: Any, value: Any) -> int:
        """Position of the live entry *key* when its value equals *value*, else -1."""
        pos = self.index_of(key)
        if pos == NOT_FOUND:
            return NOT_FOUND
        current = self._values[pos]
        if current is value or current == value:
            return pos
        return NOT_FOUND

    def contains_entry(self, key: Any, value: Any) -> bool:
        return self.index_of_entry(key, value) != NOT_FOUND

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set_value(self, key: K, value: V) -> None:
        """
        Upsert. An existing key keeps its position and the version is NOT
        bumped (live cursors stay valid). A new key is appended.
        """
        self._check_key(key)
        pos = self._index.get(key)
        if pos is not None:
            self._values[pos] = value
            return

        self._index[key] = len(self._keys)
        self._keys.append(key)
        self._values.append(value)
        self._version += 1

    __setitem__ = set_value

    def set_entry_at(self, index: int, key: K, value: V) -> None:
        """
        Replace the entry at *index*, key and value.

        Keeping the same key only replaces the value: no version bump,
        and a dead entry stays dead. A new key must not be live at any
        other position; the old key leaves the index and the new one
        points here. A key change counts as one structural mutation.
        """
        self._check_index(index)
        self._check_key(key)

        old_key = self._keys[index]
        if old_key is key or (is_indexable_key(old_key) and old_key == key):
            self._values[index] = value
            return

        pos = self._index.get(key)
        if pos is not None and pos != index:
            raise DuplicateKeyError(key)

        if self._is_live(old_key, index):
            del self._index[old_key]
        self._keys[index] = key
        self._values[index] = value
        self._index[key] = index
        self._version += 1

    def insert_at(self, index: int, key: K, value: V) -> None:
        """
        Insert a new entry at *index* (0 <= index <= count). Later entries
        shift one position later.
        """
        self._check_insert_index(index)
        self._check_key(key)
        if key in self._index:
            raise DuplicateKeyError(key)

        self._keys.insert(index, key)
        self._values.insert(index, value)
        self._shift_positions(index + 1, len(self._keys), +1)
        self._index[key] = index
        self._version += 1

    def add(self, key: K, value: V) -> None:
        """Append a new entry; the key must not be present."""
        self.insert_at(len(self._keys), key, value)

    def remove_at(self, index: int) -> Tuple[K, V]:
        """Remove the entry at *index* and return it as ``(key, value)``."""
        self._check_index(index)
        key = self._keys[index]
        live = self._is_live(key, index)

        del self._keys[index]
        value = self._values.pop(index)
        if live:
            del self._index[key]
        self._shift_positions(index, len(self._keys), -1)
        self._version += 1
        return (key, value)

    def remove_key(self, key: K) -> bool:
        """Remove the entry for *key*. Returns False if the key is absent."""
        if key is None:
            raise NullKeyError()
        if not is_indexable_key(key):
            return False
        pos = self._index.get(key)
        if pos is None:
            return False
        self.remove_at(pos)
        return True

    def __delitem__(self, key: K) -> None:
        if not self.remove_key(key):
            raise KeyError(key)

    def clear(self) -> None:
        self._keys.clear()
        self._values.clear()
        self._surplus_keys = []
        self._surplus_values = []
        self._index.clear()
        self._version += 1

    def move(self, source_index: int, dest_index: int) -> None:
        """
        Move the entry at *source_index* so that it ends up at *dest_index*
        (remove, then insert at the destination). Both indices must be in
        [0, count). One structural mutation, one version bump.
        """
        self._check_index(source_index)
        self._check_index(dest_index)

        key = self._keys[source_index]
        live = self._is_live(key, source_index)
        if live:
            del self._index[key]

        self._keys.insert(dest_index, self._keys.pop(source_index))
        self._values.insert(dest_index, self._values.pop(source_index))

        if source_index < dest_index:
            self._shift_positions(source_index, dest_index, -1)
        elif source_index > dest_index:
            self._shift_positions(dest_index + 1, source_index + 1, +1)

        if live:
            self._index[key] = dest_index
        self._version += 1

    # ------------------------------------------------------------------
    # Views and iteration
    # ------------------------------------------------------------------

    def keys(self) -> KeyView:
        return self._key_view

    def values(self) -> ValueView:
        return self._value_view

    def cursor(self) -> MapCursor:
        """Versioned cursor over ``(key, value)`` entries."""
        return MapCursor(self)

    def __iter__(self) -> MapCursor:
        return MapCursor(self)

    items = cursor

    # ------------------------------------------------------------------
    # Integrity diagnostics
    # ------------------------------------------------------------------

    @property
    def integrity(self) -> ReconcileReport:
        """Findings of the last load (empty report if never loaded)."""
        return self._report

    @property
    def duplicate_keys(self) -> frozenset:
        """Keys seen more than once at the last load. Load-time only."""
        return self._report.duplicate_keys

    def dead_positions(self) -> List[int]:
        """Positions whose entry is not reachable by key lookup (live scan)."""
        return [
            i for i, key in enumerate(self._keys) if not self._is_live(key, i)
        ]

    # ------------------------------------------------------------------
    # Misc
    # ------------------------------------------------------------------

    def copy(self) -> "OrderedMap[K, V]":
        """Independent copy with the same entries, index and report."""
        other: OrderedMap[K, V] = type(self)(suppress_errors=self.suppress_errors)
        other._keys = list(self._keys)
        other._values = list(self._values)
        other._index = dict(self._index)
        other._surplus_keys = list(self._surplus_keys)
        other._surplus_values = list(self._surplus_values)
        other._report = self._report
        return other

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedMap):
            return NotImplemented
        return self.to_persisted() == other.to_persisted()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        pairs = list(zip(self._keys, self._values))
        return f"{type(self).__name__}({pairs!r})"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _is_live(self, key: Any, pos: int) -> bool:
        return is_indexable_key(key) and self._index.get(key) == pos

    def _shift_positions(self, start: int, stop: int, delta: int) -> None:
        """
        Re-point index entries for the keys now at positions [start, stop),
        which moved by *delta* (+1 or -1). Only the live occurrence of a key
        is re-pointed; dead duplicates keep pointing nowhere.
        """
        if delta > 0:
            positions = range(stop - 1, start - 1, -1)
        else:
            positions = range(start, stop)

        for j in positions:
            key = self._keys[j]
            if is_indexable_key(key) and self._index.get(key) == j - delta:
                self._index[key] = j

    def _check_index(self, index: int) -> None:
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError(f"Index must be int, got {type(index).__name__}")
        if index < 0 or index >= len(self._keys):
            raise IndexOutOfRangeError(index, len(self._keys))

    def _check_insert_index(self, index: int) -> None:
        if not isinstance(index, int) or isinstance(index, bool):
            raise TypeError(f"Index must be int, got {type(index).__name__}")
        if index < 0 or index > len(self._keys):
            raise IndexOutOfRangeError(index, len(self._keys), inclusive=True)

    @staticmethod
    def _check_key(key: Any) -> None:
        if key is None:
            raise NullKeyError()
        if not is_indexable_key(key):
            raise TypeError(f"Key must be hashable, got {type(key).__name__}")
