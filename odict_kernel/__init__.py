"""
Ordered Map Kernel
In-memory ordered associative container: a position-indexed sequence and
a unique-key lookup table at once, with versioned cursors and resilient
load-time reconciliation of persisted key/value sequences.
"""

from .errors import (
    OrderedMapError,
    IndexOutOfRangeError,
    NullKeyError,
    DuplicateKeyError,
    InvalidOperationError,
    ReadOnlyViewError,
    CollectionModifiedError,
)
from .ordered_map import OrderedMap, NOT_FOUND
from .views import KeyView, ValueView
from .cursor import MapCursor, CursorState
from .reconcile import ReconcileReport, ReconciledState, reconcile, is_indexable_key
from .invariants import InvariantViolationError, validate_invariants
from .diagnostics import compute_diagnostics
from .snapshot import (
    SnapshotError,
    SerializationError,
    DeserializationError,
    PersistedMap,
    persisted_form,
    encode_snapshot,
    decode_snapshot,
    restore_snapshot,
    export_snapshot_to_file,
    import_snapshot_from_file,
    snapshot_hash,
    hash_snapshot_text,
)

__all__ = [
    "OrderedMapError",
    "IndexOutOfRangeError",
    "NullKeyError",
    "DuplicateKeyError",
    "InvalidOperationError",
    "ReadOnlyViewError",
    "CollectionModifiedError",
    "OrderedMap",
    "NOT_FOUND",
    "KeyView",
    "ValueView",
    "MapCursor",
    "CursorState",
    "ReconcileReport",
    "ReconciledState",
    "reconcile",
    "is_indexable_key",
    "InvariantViolationError",
    "validate_invariants",
    "compute_diagnostics",
    "SnapshotError",
    "SerializationError",
    "DeserializationError",
    "PersistedMap",
    "persisted_form",
    "encode_snapshot",
    "decode_snapshot",
    "restore_snapshot",
    "export_snapshot_to_file",
    "import_snapshot_from_file",
    "snapshot_hash",
    "hash_snapshot_text",
]
