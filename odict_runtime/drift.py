# file: odict_runtime/drift.py
"""
Drift Comparator -- pure function, no side effects.

Computes a structured diff between two persisted map dicts
(PersistedMap.to_dict() / MapSession.get_persisted()).

Only entries reachable by key take part in the key-level diff; both
sides are reconciled first, so dead entries (null keys, later
duplicates) count towards the entry totals only.
"""

from __future__ import annotations

from typing import Any, Dict, List

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from odict_kernel.reconcile import reconcile


def compare_maps(map_a: dict, map_b: dict) -> dict:
    """
    Compare two persisted map dicts and return a structured diff.

    Returns dict with:
        count_a, count_b, count_delta, added_keys, removed_keys,
        moved_keys (key, old position, new position), changed_keys,
        dead_count_a, dead_count_b
    """
    state_a = reconcile(map_a.get("keys", []), map_a.get("values", []))
    state_b = reconcile(map_b.get("keys", []), map_b.get("values", []))

    index_a: Dict[Any, int] = state_a.index
    index_b: Dict[Any, int] = state_b.index

    added = [k for k in _in_position_order(index_b) if k not in index_a]
    removed = [k for k in _in_position_order(index_a) if k not in index_b]

    moved: List[dict] = []
    changed: List[Any] = []
    for key in _in_position_order(index_b):
        if key not in index_a:
            continue
        old_pos = index_a[key]
        new_pos = index_b[key]
        if old_pos != new_pos:
            moved.append({"key": key, "from": old_pos, "to": new_pos})
        if state_a.values[old_pos] != state_b.values[new_pos]:
            changed.append(key)

    count_a = len(state_a.keys)
    count_b = len(state_b.keys)

    return {
        "count_a": count_a,
        "count_b": count_b,
        "count_delta": count_b - count_a,
        "added_keys": added,
        "removed_keys": removed,
        "moved_keys": moved,
        "changed_keys": changed,
        "dead_count_a": count_a - len(index_a),
        "dead_count_b": count_b - len(index_b),
    }


def _in_position_order(index: Dict[Any, int]) -> List[Any]:
    return sorted(index, key=index.__getitem__)
