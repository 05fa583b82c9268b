"""Row endpoints."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query

from tablesmith.api.dependencies import get_db
from tablesmith.api.models import BulkInsertRequest, InsertRowRequest
from tablesmith.core.engine import Tablesmith
from tablesmith.data.query import DEFAULT_PAGE_SIZE, TableQuery

router = APIRouter(prefix="/data", tags=["data"])

Db = Annotated[Tablesmith, Depends(get_db)]


def _query(db: Tablesmith, table_name: str) -> TableQuery:
    return TableQuery(db.connection.engine, table_name)


@router.post("/add")
def insert_row(req: InsertRowRequest, db: Db) -> dict[str, Any]:
    row = _query(db, req.table_name).insert_one(req.data)
    return {"success": True, "data": row}


@router.post("/bulk-add")
def insert_rows(req: BulkInsertRequest, db: Db) -> dict[str, Any]:
    rows = _query(db, req.table_name).insert_many(req.data)
    return {"success": True, "data": rows, "count": len(rows)}


@router.get("/{name}")
def get_rows(
    name: str,
    db: Db,
    limit: Annotated[str, Query()] = str(DEFAULT_PAGE_SIZE),
    offset: Annotated[str, Query()] = "0",
) -> dict[str, Any]:
    # Parsed strictly by the query builder, so "abc" or "-1" is a 400
    page = _query(db, name).select_page(limit=limit, offset=offset)
    return {
        "success": True,
        "data": page.rows,
        "pagination": {"limit": page.limit, "offset": page.offset, "total": page.total_count},
    }


@router.put("/{name}/{record_id}")
def update_row(
    name: str,
    record_id: str,
    db: Db,
    partial: Annotated[dict[str, Any], Body()],
) -> dict[str, Any]:
    row = _query(db, name).update_by_id(record_id, partial)
    return {"success": True, "data": row}


@router.delete("/{name}/{record_id}")
def delete_row(name: str, record_id: str, db: Db) -> dict[str, Any]:
    deleted = _query(db, name).delete_by_id(record_id)
    return {"success": True, "deleted": deleted}
