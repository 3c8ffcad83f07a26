"""
Ordered Map Kernel -- Invariant Checks

Hard-fail validation of an OrderedMap's internal consistency.
Every check raises InvariantViolationError on failure.

Used by tests after every mutation sequence and by the runtime layer
after a session load. Integrity findings of persisted data (None keys,
duplicates, length mismatch) are NOT invariant violations: reconcile()
already keeps them out of the lookup index.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ordered_map import OrderedMap


class InvariantViolationError(Exception):
    """Raised when an OrderedMap invariant is violated."""

    def __init__(self, rule: str, detail: str) -> None:
        self.rule = rule
        self.detail = detail
        super().__init__(f"[INVARIANT:{rule}] {detail}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_invariants(omap: "OrderedMap") -> None:
    """
    Run all 4 invariant checks. Raises InvariantViolationError on the
    first failure.
    """
    _check_parallel_lengths(omap)
    _check_no_null_index_key(omap)
    _check_index_positions(omap)
    _check_index_size(omap)


# ---------------------------------------------------------------------------
# Individual checks (private)
# ---------------------------------------------------------------------------

def _check_parallel_lengths(omap: "OrderedMap") -> None:
    """INV-1: Key and value sequences have the same length."""
    if len(omap._keys) != len(omap._values):
        raise InvariantViolationError(
            "parallel_lengths",
            f"{len(omap._keys)} keys vs {len(omap._values)} values"
        )


def _check_no_null_index_key(omap: "OrderedMap") -> None:
    """INV-2: None is never admitted into the lookup index."""
    if None in omap._index:
        raise InvariantViolationError(
            "no_null_index_key",
            "Lookup index contains a None key"
        )


def _check_index_positions(omap: "OrderedMap") -> None:
    """INV-3: Every indexed position is in range and holds its key."""
    count = len(omap._keys)
    for key, pos in omap._index.items():
        if not 0 <= pos < count:
            raise InvariantViolationError(
                "index_positions",
                f"Key {key!r} indexed at {pos}, outside [0, {count})"
            )
        if omap._keys[pos] != key:
            raise InvariantViolationError(
                "index_positions",
                f"Key {key!r} indexed at {pos} but position holds "
                f"{omap._keys[pos]!r}"
            )


def _check_index_size(omap: "OrderedMap") -> None:
    """INV-4: The lookup index never holds more keys than there are entries."""
    if len(omap._index) > len(omap._keys):
        raise InvariantViolationError(
            "index_size",
            f"{len(omap._index)} indexed keys for {len(omap._keys)} entries"
        )
