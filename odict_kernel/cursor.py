"""
Ordered Map Kernel -- Versioned Iteration Cursor

A cursor observes the live map (no snapshot, no copy). It captures the
map's version at creation and re-validates it on every advance() and
reset(). ANY structural mutation of the owner after creation (insert,
remove, clear, move, reload) invalidates the cursor, including appends
that would not disturb already-yielded entries.

In-place value replacement through set_value() does not change the
version, so it does not invalidate cursors; the replaced value is seen
by a later advance() over that position.

States:
    CREATED    position == -1, current is None
    ADVANCING  0 <= position < count, current is the entry at position
    ENDED      position == count, current is None

``current`` is None whenever no element is under the cursor (CREATED or
ENDED). For an entry cursor ``key`` and ``value`` are None as well.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Any, Callable, Generic, Optional, TypeVar

from .errors import CollectionModifiedError

if TYPE_CHECKING:
    from .ordered_map import OrderedMap

T = TypeVar("T")


class CursorState(enum.Enum):
    CREATED = "created"
    ADVANCING = "advancing"
    ENDED = "ended"


def project_entry(owner: "OrderedMap", i: int) -> tuple:
    return (owner._keys[i], owner._values[i])


def project_key(owner: "OrderedMap", i: int) -> Any:
    return owner._keys[i]


def project_value(owner: "OrderedMap", i: int) -> Any:
    return owner._values[i]


class MapCursor(Generic[T]):
    """
    Enumerator bound to one OrderedMap and one captured version.

    Usable both explicitly (advance / current / reset) and through the
    Python iterator protocol.
    """

    def __init__(
        self,
        owner: "OrderedMap",
        project: Callable[["OrderedMap", int], T] = project_entry,
    ) -> None:
        self._owner = owner
        self._version = owner.version
        self._project = project
        self._position = -1
        self._state = CursorState.CREATED
        self._current: Optional[T] = None

    # -- State access -------------------------------------------------------

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def position(self) -> int:
        return self._position

    @property
    def version(self) -> int:
        """Owner version captured when the cursor was created."""
        return self._version

    @property
    def current(self) -> Optional[T]:
        """Element under the cursor, or None in CREATED / ENDED state."""
        return self._current

    @property
    def key(self) -> Any:
        """Key of the current entry (entry cursors only), else None."""
        if self._project is project_entry and self._current is not None:
            return self._current[0]
        return None

    @property
    def value(self) -> Any:
        """Value of the current entry (entry cursors only), else None."""
        if self._project is project_entry and self._current is not None:
            return self._current[1]
        return None

    # -- Transitions --------------------------------------------------------

    def advance(self) -> bool:
        """
        Step to the next element.

        Returns True when an element is now under the cursor, False once
        the end is reached. Raises CollectionModifiedError if the owner
        changed structurally since the cursor was created.
        """
        self._check_version()

        count = len(self._owner._keys)
        if self._position + 1 < count:
            self._position += 1
            self._state = CursorState.ADVANCING
            self._current = self._project(self._owner, self._position)
            return True

        self._position = count
        self._state = CursorState.ENDED
        self._current = None
        return False

    def reset(self) -> None:
        """Return to CREATED. Same version check as advance()."""
        self._check_version()
        self._position = -1
        self._state = CursorState.CREATED
        self._current = None

    # -- Iterator protocol --------------------------------------------------

    def __iter__(self) -> "MapCursor[T]":
        return self

    def __next__(self) -> T:
        if self.advance():
            return self._current  # type: ignore[return-value]
        raise StopIteration

    def _check_version(self) -> None:
        actual = self._owner.version
        if actual != self._version:
            raise CollectionModifiedError(self._version, actual)
