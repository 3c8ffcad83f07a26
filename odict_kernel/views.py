"""
Ordered Map Kernel -- Key / Value Views

Thin read-only ordered projections of one OrderedMap. A view stores
nothing but the back-reference to its owner; every query reads the
owner's live sequences. Views are created once by the owner and handed
out through OrderedMap.keys() / OrderedMap.values().

Capabilities: ordered, countable, positionally indexable, iterable
(collections.abc.Sequence, so negative indexes and slices work as on a
list). The mutable-sequence calling surface is present for host
compatibility but every mutator raises ReadOnlyViewError.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Callable, List, NoReturn

from .cursor import MapCursor, project_key, project_value
from .errors import IndexOutOfRangeError, ReadOnlyViewError

if TYPE_CHECKING:
    from .ordered_map import OrderedMap


class _MapView(Sequence):
    """Shared read-only surface of KeyView and ValueView."""

    _project: Callable[["OrderedMap", int], Any]

    def __init__(self, owner: "OrderedMap") -> None:
        self._owner = owner

    # -- Read ---------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._owner)

    def __getitem__(self, index: Any) -> Any:
        """
        Sequence indexing: negative ints count from the end, slices
        return a plain list. Out-of-range ints raise IndexOutOfRangeError.
        """
        count = len(self._owner)
        if isinstance(index, slice):
            return [
                type(self)._project(self._owner, i)
                for i in range(*index.indices(count))
            ]
        if isinstance(index, int) and not isinstance(index, bool) and index < 0:
            if index + count < 0:
                raise IndexOutOfRangeError(index, count)
            index += count
        self._owner._check_index(index)
        return type(self)._project(self._owner, index)

    def __iter__(self) -> MapCursor:
        return self.cursor()

    def cursor(self) -> MapCursor:
        """Versioned cursor over this projection."""
        return MapCursor(self._owner, type(self)._project)

    def to_list(self) -> List[Any]:
        return [type(self)._project(self._owner, i) for i in range(len(self._owner))]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_list()!r})"

    # -- Mutation (always rejected) -----------------------------------------

    def _reject(self, operation: str) -> NoReturn:
        raise ReadOnlyViewError(operation)

    def __setitem__(self, index: Any, item: Any) -> NoReturn:
        self._reject("__setitem__")

    def __delitem__(self, index: Any) -> NoReturn:
        self._reject("__delitem__")

    def add(self, item: Any) -> NoReturn:
        self._reject("add")

    def append(self, item: Any) -> NoReturn:
        self._reject("append")

    def extend(self, items: Any) -> NoReturn:
        self._reject("extend")

    def insert(self, index: int, item: Any) -> NoReturn:
        self._reject("insert")

    def remove(self, item: Any) -> NoReturn:
        self._reject("remove")

    def pop(self, index: int = -1) -> NoReturn:
        self._reject("pop")

    def clear(self) -> NoReturn:
        self._reject("clear")


class KeyView(_MapView):
    """Ordered keys. Membership is O(1) through the owner's lookup index."""

    _project = staticmethod(project_key)

    def __contains__(self, key: Any) -> bool:
        return self._owner.contains_key(key)

    def index_of(self, key: Any) -> int:
        return self._owner.index_of(key)


class ValueView(_MapView):
    """
    Ordered values. Values are not unique and not indexed, so membership
    and index_of() are linear scans using ``==``.
    """

    _project = staticmethod(project_value)

    def __contains__(self, value: Any) -> bool:
        for item in self._owner._values:
            if item is value or item == value:
                return True
        return False

    def index_of(self, value: Any) -> int:
        for i, item in enumerate(self._owner._values):
            if item is value or item == value:
                return i
        return -1
