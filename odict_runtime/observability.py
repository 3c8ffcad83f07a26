# file: odict_runtime/observability.py
"""
Observability -- In-process metrics collection.

No external dependencies. Uses compute_diagnostics + timing.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .session import MapSession


@dataclass(frozen=True)
class SessionMetrics:
    """Snapshot of observable session metrics."""

    load_latency_ms: float
    entry_count: int
    live_entry_count: int
    dead_entry_count: int
    duplicate_key_count: int
    invalid_key_count: int
    snapshot_hash: str
    revision: int
    warnings: list


def collect_metrics(session: "MapSession") -> SessionMetrics:
    """
    Collect metrics from a live session.

    Measures a full encode -> restore cycle of the current map, which
    is the same path a load from the store takes.
    """
    from odict_kernel.snapshot import (
        encode_snapshot,
        hash_snapshot_text,
        restore_snapshot,
    )

    canonical = encode_snapshot(session.map)

    start = time.perf_counter()
    restore_snapshot(canonical)
    elapsed_ms = (time.perf_counter() - start) * 1000.0

    diagnostics = session.get_diagnostics()

    return SessionMetrics(
        load_latency_ms=round(elapsed_ms, 2),
        entry_count=diagnostics["entry_count"],
        live_entry_count=diagnostics["live_entry_count"],
        dead_entry_count=diagnostics["dead_entry_count"],
        duplicate_key_count=len(diagnostics["duplicate_keys"]),
        invalid_key_count=len(diagnostics["invalid_positions"]),
        snapshot_hash=hash_snapshot_text(canonical),
        revision=session.revision,
        warnings=diagnostics["warnings"],
    )
