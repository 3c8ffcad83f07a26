"""
Ordered Map Kernel -- Caller-Misuse Errors

Raised synchronously by the explicit mutation / query API.
A raising call never leaves partial state behind.

Data-integrity findings discovered while reconciling persisted data
are NOT errors; see reconcile.ReconcileReport.
"""

from __future__ import annotations

from typing import Any


class OrderedMapError(Exception):
    """Base exception for all caller-misuse errors."""


class IndexOutOfRangeError(OrderedMapError, IndexError):
    """Raised when a positional argument falls outside the valid range."""

    def __init__(self, index: int, count: int, inclusive: bool = False) -> None:
        self.index = index
        self.count = count
        upper = f"{count}]" if inclusive else f"{count})"
        super().__init__(
            f"Index {index!r} out of range [0, {upper}"
        )


class NullKeyError(OrderedMapError, ValueError):
    """Raised when None is passed as a key to an explicit mutation call."""

    def __init__(self) -> None:
        super().__init__("Key must not be None")


class DuplicateKeyError(OrderedMapError, ValueError):
    """Raised when inserting a key that is already present."""

    def __init__(self, key: Any) -> None:
        self.key = key
        super().__init__(f"Already contains key {key!r}")


class InvalidOperationError(OrderedMapError, RuntimeError):
    """Raised when an operation is not permitted in the current state."""


class ReadOnlyViewError(InvalidOperationError):
    """Raised on any attempt to mutate through a key or value view."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Collection is read-only (attempted {operation})")


class CollectionModifiedError(InvalidOperationError):
    """Raised when a cursor is used after its owner was structurally changed."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            "Collection was modified during enumeration "
            f"(cursor version {expected}, map version {actual})"
        )
