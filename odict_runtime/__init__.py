# file: odict_runtime/__init__.py
"""
Ordered Map Runtime -- Persistence Layer

sqlite3 snapshot store, per-asset session with lenient load and WARN
reporting, drift comparison and in-process metrics around the Ordered
Map Kernel.
"""

from .map_repository import MapRepository
from .session import MapSession, PersistenceMismatchError
from .drift import compare_maps
from .observability import SessionMetrics, collect_metrics

__all__ = [
    "MapRepository",
    "MapSession",
    "PersistenceMismatchError",
    "compare_maps",
    "SessionMetrics",
    "collect_metrics",
]
