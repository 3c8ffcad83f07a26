"""
Ordered Map Kernel -- Load-Time Reconciliation

Rebuilds the key -> position lookup index from two raw, possibly
inconsistent parallel sequences (keys, values) as they come back from
persisted storage.

Rules:
  - Never raises for malformed input. Findings go to ReconcileReport.
  - Mismatched lengths: the shorter length is the effective bound. The
    surplus tail of the longer sequence is not loaded as entries but is
    carried along verbatim (ReconciledState.surplus_keys / surplus_values)
    so that writing the map back loses nothing. It is also reported.
  - A None (or unhashable) key is an invalid entry: visible by position,
    never indexed.
  - A repeated key is a duplicate: the FIRST occurrence owns the index
    mapping, later ones are visible by position only.
  - Keys compare with Python equality and hashing: 1, 1.0 and True are
    the same key, so a persisted [1, true] reports a duplicate.
  - Entries inside the effective bound are kept verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Sequence, Tuple


def is_indexable_key(key: Any) -> bool:
    """True if *key* may live in the lookup index (not None, hashable)."""
    if key is None:
        return False
    try:
        hash(key)
    except TypeError:
        return False
    return True


@dataclass(frozen=True)
class ReconcileReport:
    """
    Read-only integrity findings of one reconciliation pass.

    A load-time snapshot: later mutations of the map do not update it.
    Never persisted; recomputed on every load.
    """

    key_count: int = 0
    value_count: int = 0
    truncated_keys: Tuple[Any, ...] = ()
    truncated_values: Tuple[Any, ...] = ()
    invalid_positions: Tuple[int, ...] = ()
    duplicate_keys: FrozenSet[Any] = frozenset()
    duplicate_positions: Tuple[int, ...] = ()

    @property
    def length_mismatch(self) -> bool:
        return self.key_count != self.value_count

    @property
    def effective_count(self) -> int:
        return min(self.key_count, self.value_count)

    @property
    def is_clean(self) -> bool:
        return (
            not self.length_mismatch
            and not self.invalid_positions
            and not self.duplicate_keys
        )

    def findings(self) -> List[str]:
        """Human-readable findings, in a stable order, for host warnings."""
        lines: List[str] = []
        if self.length_mismatch:
            lines.append(
                f"Inconsistent quantity of keys ({self.key_count}) and "
                f"values ({self.value_count}); "
                f"{len(self.truncated_keys) + len(self.truncated_values)} "
                f"trailing item(s) not loaded"
            )
        for pos in self.invalid_positions:
            lines.append(f"Encountered invalid key at position {pos}")
        for key in sorted(self.duplicate_keys, key=repr):
            lines.append(f"Has multiple values for the key {key!r}")
        return lines


@dataclass
class ReconciledState:
    """Output of reconcile(): the aligned sequences plus derived data."""

    keys: List[Any] = field(default_factory=list)
    values: List[Any] = field(default_factory=list)
    index: Dict[Any, int] = field(default_factory=dict)
    report: ReconcileReport = field(default_factory=ReconcileReport)
    surplus_keys: List[Any] = field(default_factory=list)
    surplus_values: List[Any] = field(default_factory=list)


def reconcile(
    raw_keys: Sequence[Any], raw_values: Sequence[Any],
) -> ReconciledState:
    """
    Rebuild lookup index and diagnostics from raw persisted sequences.

    The input sequences are copied, never mutated.
    """
    keys = list(raw_keys)
    values = list(raw_values)
    key_count = len(keys)
    value_count = len(values)
    bound = min(key_count, value_count)

    surplus_keys = keys[bound:]
    surplus_values = values[bound:]
    del keys[bound:]
    del values[bound:]

    index: Dict[Any, int] = {}
    invalid: List[int] = []
    duplicates: set = set()
    duplicate_positions: List[int] = []

    for i, key in enumerate(keys):
        if not is_indexable_key(key):
            invalid.append(i)
            continue
        if key in index:
            duplicates.add(key)
            duplicate_positions.append(i)
            continue
        index[key] = i

    report = ReconcileReport(
        key_count=key_count,
        value_count=value_count,
        truncated_keys=tuple(surplus_keys),
        truncated_values=tuple(surplus_values),
        invalid_positions=tuple(invalid),
        duplicate_keys=frozenset(duplicates),
        duplicate_positions=tuple(duplicate_positions),
    )
    return ReconciledState(
        keys=keys,
        values=values,
        index=index,
        report=report,
        surplus_keys=surplus_keys,
        surplus_values=surplus_values,
    )
