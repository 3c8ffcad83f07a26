# file: odict_kernel/snapshot.py
"""
Ordered Map Kernel -- Snapshot Encoder / Decoder

Canonical JSON form of an OrderedMap: two parallel flat sequences plus
the display-only suppress flag.

    {"keys":[...],"suppress_errors":false,"values":[...]}

Rules:
  - Sequences written in current positional order, verbatim (dead
    entries included).
  - Version counter and diagnostics are never written.
  - Keys must be JSON scalars (str, int, float, bool) or null.
  - Decode is strict about STRUCTURE (fields, types) and lenient about
    INTEGRITY (mismatched lengths, null / duplicate keys): integrity is
    the job of reconcile(), which restore_snapshot() always runs.
"""

from __future__ import annotations

import hashlib
import json
import pathlib
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .ordered_map import OrderedMap


# ══════════════════════════════════════════════════════════════
# Exception Hierarchy
# ══════════════════════════════════════════════════════════════

class SnapshotError(Exception):
    """Base exception for all snapshot operations."""


class SerializationError(SnapshotError):
    """Raised when encoding an OrderedMap to JSON fails."""


class DeserializationError(SnapshotError):
    """Raised when decoding JSON to the persisted form fails."""


# ══════════════════════════════════════════════════════════════
# Persisted Form
# ══════════════════════════════════════════════════════════════

_SCALAR_KEY_TYPES = (str, int, float, bool)


@dataclass
class PersistedMap:
    """Raw persisted sequences, before reconciliation."""

    keys: List[Any] = field(default_factory=list)
    values: List[Any] = field(default_factory=list)
    suppress_errors: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keys": list(self.keys),
            "suppress_errors": self.suppress_errors,
            "values": list(self.values),
        }

    def to_map(self) -> OrderedMap:
        """Reconcile into a live OrderedMap. Never raises on bad data."""
        return OrderedMap.from_persisted(
            self.keys, self.values, suppress_errors=self.suppress_errors,
        )


def persisted_form(omap: OrderedMap) -> PersistedMap:
    keys, values = omap.to_persisted()
    return PersistedMap(
        keys=keys, values=values, suppress_errors=omap.suppress_errors,
    )


# ══════════════════════════════════════════════════════════════
# Encoder
# ══════════════════════════════════════════════════════════════

def encode_snapshot(omap: OrderedMap) -> str:
    """
    Serialize an OrderedMap into a canonical JSON string.

    Byte-for-byte identical output for identical maps.
    No mutation. No side effects. No reconciliation.
    """
    try:
        obj = persisted_form(omap).to_dict()
        for i, key in enumerate(obj["keys"]):
            if key is not None and not isinstance(key, _SCALAR_KEY_TYPES):
                raise TypeError(
                    f"key at position {i} has non-scalar type "
                    f"{type(key).__name__}"
                )
        return json.dumps(
            obj,
            ensure_ascii=False,
            separators=(",", ":"),
            sort_keys=True,
            allow_nan=False,
        )
    except Exception as exc:
        raise SerializationError(f"Failed to encode snapshot: {exc}") from exc


# ══════════════════════════════════════════════════════════════
# Decoder
# ══════════════════════════════════════════════════════════════

# -- Field whitelist (exact set, no extras, no omissions) --

_SNAPSHOT_FIELDS = frozenset({"keys", "suppress_errors", "values"})


def decode_snapshot(json_str: str) -> PersistedMap:
    """
    Structural deserialization of canonical JSON to PersistedMap.

    Fails on: invalid JSON, missing / unknown fields, non-array
    sequences, non-scalar keys, non-bool suppress flag.
    Does NOT fail on integrity findings; see restore_snapshot().
    """
    try:
        raw = json.loads(json_str)
    except json.JSONDecodeError as exc:
        raise DeserializationError(f"Invalid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise DeserializationError(
            f"Top-level JSON must be object, got {type(raw).__name__}"
        )

    _check_fields(raw, _SNAPSHOT_FIELDS, "snapshot")

    keys = raw["keys"]
    if not isinstance(keys, list):
        raise DeserializationError("'keys' must be a JSON array")
    for i, key in enumerate(keys):
        if isinstance(key, (list, dict)):
            raise DeserializationError(
                f"Key [{i}] must be a JSON scalar or null, "
                f"got {type(key).__name__}"
            )

    values = raw["values"]
    if not isinstance(values, list):
        raise DeserializationError("'values' must be a JSON array")

    suppress_errors = raw["suppress_errors"]
    if not isinstance(suppress_errors, bool):
        raise DeserializationError(
            f"'suppress_errors' must be bool, "
            f"got {type(suppress_errors).__name__}"
        )

    return PersistedMap(
        keys=list(keys),
        values=list(values),
        suppress_errors=suppress_errors,
    )


# ══════════════════════════════════════════════════════════════
# Restore (decode + reconcile)
# ══════════════════════════════════════════════════════════════

def restore_snapshot(json_str: str) -> OrderedMap:
    """
    Decode a snapshot and rebuild the map through reconciliation.

    Structural problems raise DeserializationError. Integrity findings
    never raise; they are available on the result's ``integrity``.
    """
    return decode_snapshot(json_str).to_map()


# ══════════════════════════════════════════════════════════════
# File I/O
# ══════════════════════════════════════════════════════════════

def export_snapshot_to_file(omap: OrderedMap, path: pathlib.Path) -> None:
    """
    Export canonical snapshot JSON to a file.

    UTF-8 only. File content is byte-identical for identical maps.
    """
    canonical = encode_snapshot(omap)
    path.write_text(canonical, encoding="utf-8")


def import_snapshot_from_file(path: pathlib.Path) -> OrderedMap:
    """Import a snapshot from a file and reconcile it."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, IOError) as exc:
        raise DeserializationError(
            f"Failed to read snapshot file {path}: {exc}"
        ) from exc
    return restore_snapshot(text)


# ══════════════════════════════════════════════════════════════
# Integrity Hash
# ══════════════════════════════════════════════════════════════

def snapshot_hash(omap: OrderedMap) -> str:
    """SHA-256 of canonical JSON bytes. Lowercase hex. Deterministic."""
    return hash_snapshot_text(encode_snapshot(omap))


def hash_snapshot_text(canonical: str) -> str:
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


# ══════════════════════════════════════════════════════════════
# Internal Validation Helpers
# ══════════════════════════════════════════════════════════════

def _check_fields(
    data: dict, expected: frozenset, context: str,
) -> None:
    """Fail if data has missing or unknown fields vs expected set."""
    actual = set(data.keys())
    missing = expected - actual
    unknown = actual - expected
    if missing:
        raise DeserializationError(
            f"Missing fields in {context}: {sorted(missing)}"
        )
    if unknown:
        raise DeserializationError(
            f"Unknown fields in {context}: {sorted(unknown)}"
        )
