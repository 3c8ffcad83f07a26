# file: backend/main.py
"""
FastAPI Backend -- Ordered Map API v1.

Stateless: every request loads the asset from the DB, applies one
operation and saves. No in-memory state between requests.

Endpoints:
  GET    /maps                             -- list asset ids
  GET    /maps/{asset_id}                  -- load + return projection
  POST   /maps/{asset_id}/import           -- replace raw sequences (reconciled)
  GET    /maps/{asset_id}/export           -- persisted form
  POST   /maps/{asset_id}/insert           -- insert at position
  POST   /maps/{asset_id}/remove           -- remove at position
  POST   /maps/{asset_id}/move             -- move entry to position
  POST   /maps/{asset_id}/set              -- upsert by key
  POST   /maps/{asset_id}/entry            -- replace key and value at position
  PATCH  /maps/{asset_id}/suppress-errors  -- toggle warning display
  DELETE /maps/{asset_id}                  -- drop the asset
  GET    /maps/{asset_id}/metrics          -- session metrics
"""
from __future__ import annotations

import dataclasses
import os
import sys
from typing import Any, Callable, List

from dotenv import load_dotenv

env_path = os.path.join(os.path.dirname(__file__), ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

# Add project root to path for kernel imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from odict_kernel.errors import (
    DuplicateKeyError,
    IndexOutOfRangeError,
    NullKeyError,
)
from odict_kernel.snapshot import SnapshotError
from odict_runtime.map_repository import MapRepository
from odict_runtime.session import MapSession

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DATABASE_PATH = os.environ.get("DATABASE_PATH", "odict.sqlite3")
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")

# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="OrderedMap API",
    version="1.0.0",
    description="Ordered key/value assets with positional editing and lenient load",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        FRONTEND_URL,
        "http://localhost:3000",
        "http://localhost:3001",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class ImportRequest(BaseModel):
    keys: List[Any]
    values: List[Any]
    suppress_errors: bool = False


class InsertRequest(BaseModel):
    index: int
    key: Any = None
    value: Any = None


class RemoveRequest(BaseModel):
    index: int


class MoveRequest(BaseModel):
    source_index: int
    dest_index: int


class SetEntryRequest(BaseModel):
    index: int
    key: Any = None
    value: Any = None


class SetValueRequest(BaseModel):
    key: Any = None
    value: Any = None


class SuppressErrorsRequest(BaseModel):
    suppress_errors: bool


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def _get_repo() -> MapRepository:
    if not DATABASE_PATH:
        raise HTTPException(
            status_code=500,
            detail="DATABASE_PATH not configured",
        )
    return MapRepository(DATABASE_PATH)


def _open_session(repo: MapRepository, asset_id: str, create: bool = False) -> MapSession:
    session = MapSession(asset_id, repo)
    try:
        found = session.load()
    except SnapshotError as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Stored snapshot for {asset_id!r} is unreadable: {exc}",
        )
    if not found and not create:
        raise HTTPException(status_code=404, detail=f"Unknown asset: {asset_id!r}")
    return session


def _project(session: MapSession) -> dict:
    """Projection returned by every map endpoint."""
    entries = [
        {"position": i, "key": key, "value": value}
        for i, (key, value) in enumerate(session.get_entries())
    ]
    return {
        "asset_id": session.asset_id,
        "entries": entries,
        "count": len(entries),
        "diagnostics": session.get_diagnostics(),
        "revision": session.revision,
    }


def _apply_and_save(
    asset_id: str,
    operation: Callable[[MapSession], Any],
    create: bool = False,
) -> dict:
    """
    Load → apply one operation → save → project.

    A rejected operation raises before save, so nothing is persisted.
    """
    repo = _get_repo()
    try:
        session = _open_session(repo, asset_id, create=create)
        try:
            operation(session)
        except IndexOutOfRangeError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except NullKeyError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except DuplicateKeyError as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        except TypeError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid key: {exc}")

        try:
            session.save()
        except SnapshotError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return _project(session)
    finally:
        repo.close()


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/maps")
def list_maps():
    repo = _get_repo()
    try:
        return {"assets": repo.list_assets()}
    finally:
        repo.close()


@app.get("/maps/{asset_id}")
def get_map(asset_id: str):
    """
    Load the asset → return projection + diagnostics.
    """
    repo = _get_repo()
    try:
        return _project(_open_session(repo, asset_id))
    finally:
        repo.close()


@app.post("/maps/{asset_id}/import")
def import_map(asset_id: str, req: ImportRequest):
    """
    Replace the asset with raw key/value sequences.

    Never rejected for integrity problems: mismatched lengths, null and
    duplicate keys are reconciled and reported in diagnostics.
    """
    return _apply_and_save(
        asset_id,
        lambda s: s.import_sequences(
            req.keys, req.values, suppress_errors=req.suppress_errors,
        ),
        create=True,
    )


@app.get("/maps/{asset_id}/export")
def export_map(asset_id: str):
    repo = _get_repo()
    try:
        session = _open_session(repo, asset_id)
        return session.get_persisted()
    finally:
        repo.close()


@app.post("/maps/{asset_id}/insert")
def insert_entry(asset_id: str, req: InsertRequest):
    return _apply_and_save(
        asset_id, lambda s: s.insert_at(req.index, req.key, req.value),
    )


@app.post("/maps/{asset_id}/remove")
def remove_entry(asset_id: str, req: RemoveRequest):
    return _apply_and_save(asset_id, lambda s: s.remove_at(req.index))


@app.post("/maps/{asset_id}/move")
def move_entry(asset_id: str, req: MoveRequest):
    return _apply_and_save(
        asset_id, lambda s: s.move(req.source_index, req.dest_index),
    )


@app.post("/maps/{asset_id}/set")
def set_value(asset_id: str, req: SetValueRequest):
    """Upsert by key. Creates the asset when it does not exist yet."""
    return _apply_and_save(
        asset_id, lambda s: s.set_value(req.key, req.value), create=True,
    )


@app.post("/maps/{asset_id}/entry")
def set_entry(asset_id: str, req: SetEntryRequest):
    """Replace key and value at a position; a changed key must be unused."""
    return _apply_and_save(
        asset_id, lambda s: s.set_entry_at(req.index, req.key, req.value),
    )


@app.patch("/maps/{asset_id}/suppress-errors")
def set_suppress_errors(asset_id: str, req: SuppressErrorsRequest):
    return _apply_and_save(
        asset_id, lambda s: s.set_suppress_errors(req.suppress_errors),
    )


@app.delete("/maps/{asset_id}")
def delete_map(asset_id: str):
    repo = _get_repo()
    try:
        if not repo.delete(asset_id):
            raise HTTPException(status_code=404, detail=f"Unknown asset: {asset_id!r}")
        return {"status": "deleted", "asset_id": asset_id}
    finally:
        repo.close()


@app.get("/maps/{asset_id}/metrics")
def get_metrics(asset_id: str):
    repo = _get_repo()
    try:
        session = _open_session(repo, asset_id)
        return dataclasses.asdict(session.get_metrics())
    finally:
        repo.close()


@app.get("/health")
def health():
    return {"status": "ok", "version": "1.0.0"}
