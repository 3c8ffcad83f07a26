# file: odict_runtime/session.py
"""
Map Session -- orchestrates one OrderedMap asset + persistence.

Mutate-before-persist order:
  1. kernel mutation on the in-memory map  -- may raise (range, null, duplicate)
  2. save()                                -- explicit, caller decides when

A failed mutation leaves the map untouched, so whatever is saved is
always a state the kernel accepted.

Load is lenient: malformed stored sequences are reconciled, never
rejected. Findings are printed as WARN lines unless the map's
suppress_errors flag is set; the kernel itself never prints.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from odict_kernel.diagnostics import compute_diagnostics
from odict_kernel.invariants import validate_invariants
from odict_kernel.ordered_map import OrderedMap
from odict_kernel.reconcile import ReconcileReport
from odict_kernel.snapshot import (
    encode_snapshot,
    hash_snapshot_text,
    persisted_form,
    restore_snapshot,
)

from .map_repository import MapRepository


class PersistenceMismatchError(Exception):
    """Raised when a stored snapshot does not match its stored hash."""

    def __init__(self, asset_id: str, expected: str, actual: str):
        self.asset_id = asset_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Persistence mismatch for asset {asset_id!r}: "
            f"stored hash={expected!r}, recomputed hash={actual!r}"
        )


class MapSession:
    """
    Holds the live OrderedMap for one asset and its store.

    The session is the host boundary: it prints integrity findings,
    the map only records them.
    """

    def __init__(self, asset_id: str, repo: MapRepository) -> None:
        self._asset_id = asset_id
        self._repo = repo
        self._map: OrderedMap = OrderedMap()
        self._revision: int = 0

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    def load(self) -> bool:
        """
        Restore the asset from the store.

        Returns False (and keeps an empty map) when nothing is stored.
        Integrity findings never raise; see get_diagnostics().
        """
        stored = self._repo.load_snapshot(self._asset_id)
        if stored is None:
            self._map = OrderedMap()
            self._revision = 0
            return False

        self._revision, snapshot_json = stored
        self._map = restore_snapshot(snapshot_json)
        validate_invariants(self._map)
        self._warn(self._map.integrity)
        return True

    def save(self) -> int:
        """Encode, hash and persist the current map. Returns the revision."""
        validate_invariants(self._map)
        canonical = encode_snapshot(self._map)
        self._revision = self._repo.save_snapshot(
            self._asset_id, canonical, hash_snapshot_text(canonical),
        )
        return self._revision

    def import_sequences(
        self,
        keys: Sequence[Any],
        values: Sequence[Any],
        suppress_errors: Optional[bool] = None,
    ) -> ReconcileReport:
        """Replace the contents with host-provided raw sequences."""
        if suppress_errors is not None:
            self._map.suppress_errors = suppress_errors
        report = self._map.load_persisted(keys, values)
        self._warn(report)
        return report

    # ------------------------------------------------------------------
    # Delegates
    # ------------------------------------------------------------------

    def insert_at(self, index: int, key: Any, value: Any) -> None:
        self._map.insert_at(index, key, value)

    def remove_at(self, index: int) -> Tuple[Any, Any]:
        return self._map.remove_at(index)

    def remove_key(self, key: Any) -> bool:
        return self._map.remove_key(key)

    def move(self, source_index: int, dest_index: int) -> None:
        self._map.move(source_index, dest_index)

    def set_value(self, key: Any, value: Any) -> None:
        self._map.set_value(key, value)

    def set_entry_at(self, index: int, key: Any, value: Any) -> None:
        self._map.set_entry_at(index, key, value)

    def clear(self) -> None:
        self._map.clear()

    def set_suppress_errors(self, suppress: bool) -> None:
        self._map.suppress_errors = suppress

    def get_diagnostics(self) -> dict:
        return compute_diagnostics(self._map)

    def get_entries(self) -> List[Tuple[Any, Any]]:
        keys, values = self._map.to_persisted()
        return list(zip(keys, values))

    def get_persisted(self) -> dict:
        return persisted_form(self._map).to_dict()

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify_persisted(self) -> bool:
        """
        Recompute the hash of the stored snapshot and of its re-encoding
        and compare both against the stored hash.

        Raises PersistenceMismatchError on mismatch.
        Returns True if consistent (or nothing is stored yet).
        """
        stored = self._repo.load_snapshot(self._asset_id)
        stored_hash = self._repo.load_hash(self._asset_id)
        if stored is None or stored_hash is None:
            return True

        _, snapshot_json = stored
        actual = hash_snapshot_text(snapshot_json)
        if actual != stored_hash:
            raise PersistenceMismatchError(self._asset_id, stored_hash, actual)

        reencoded = hash_snapshot_text(
            encode_snapshot(restore_snapshot(snapshot_json))
        )
        if reencoded != stored_hash:
            raise PersistenceMismatchError(
                self._asset_id, stored_hash, reencoded,
            )
        return True

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def get_metrics(self) -> "SessionMetrics":
        """Collect metrics from the current session."""
        from .observability import collect_metrics
        return collect_metrics(self)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def asset_id(self) -> str:
        return self._asset_id

    @property
    def map(self) -> OrderedMap:
        return self._map

    @property
    def revision(self) -> int:
        return self._revision

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _warn(self, report: ReconcileReport) -> None:
        if self._map.suppress_errors:
            return
        for finding in report.findings():
            print(f"WARN: [{self._asset_id}] {finding}")
