"""
Ordered Map Kernel -- Diagnostics

Compute a diagnostic snapshot of an OrderedMap for the host layer.
Warnings are always computed; whether they are shown is the host's call
(OrderedMap.suppress_errors).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ordered_map import OrderedMap


def compute_diagnostics(omap: "OrderedMap") -> dict:
    """
    Return a diagnostic dict summarising the map's integrity.

    Combines the load-time ReconcileReport with a live scan for entries
    that are not reachable by key.
    """
    report = omap.integrity
    dead = omap.dead_positions()

    warnings: list[str] = list(report.findings())

    if dead:
        noun = "entry" if len(dead) == 1 else "entries"
        warnings.append(
            f"{len(dead)} {noun} unreachable by key at position(s): "
            f"{', '.join(str(p) for p in dead)}"
        )

    return {
        "entry_count": len(omap),
        "live_entry_count": len(omap) - len(dead),
        "dead_entry_count": len(dead),
        "dead_positions": dead,
        "duplicate_keys": sorted(report.duplicate_keys, key=repr),
        "invalid_positions": list(report.invalid_positions),
        "length_mismatch": report.length_mismatch,
        "suppress_errors": omap.suppress_errors,
        "version": omap.version,
        "warnings": warnings,
    }
