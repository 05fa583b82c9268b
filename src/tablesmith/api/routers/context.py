"""Table context endpoints."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from tablesmith.api.dependencies import get_db
from tablesmith.api.models import SaveContextRequest
from tablesmith.context.store import DEFAULT_SEARCH_LIMIT
from tablesmith.core.engine import Tablesmith

router = APIRouter(prefix="/context", tags=["context"])

# Not under /context, where every path segment is a table name
search_router = APIRouter(prefix="/search", tags=["context"])

Db = Annotated[Tablesmith, Depends(get_db)]


@router.post("")
def save_context(req: SaveContextRequest, db: Db) -> dict[str, Any]:
    context = db.save_context(req.table_name, req.description)
    return {"success": True, "context": context.to_public()}


@router.get("")
def list_contexts(db: Db) -> dict[str, Any]:
    return {"success": True, "contexts": [c.to_public() for c in db.list_contexts()]}


@search_router.get("/context")
def search_contexts(
    db: Db,
    q: Annotated[str, Query()],
    limit: Annotated[str, Query()] = str(DEFAULT_SEARCH_LIMIT),
) -> dict[str, Any]:
    results = db.search_contexts(q, limit)
    return {
        "success": True,
        "results": [
            {**r.context.to_public(), "distance": r.distance, "score": r.score} for r in results
        ],
    }


@router.get("/{name}")
def get_context(name: str, db: Db) -> dict[str, Any]:
    return {"success": True, "context": db.get_context(name).to_public()}


@router.delete("/{name}")
def delete_context(name: str, db: Db) -> dict[str, Any]:
    deleted = db.delete_context(name)
    return {"success": True, "deleted": deleted}
