"""Table definition endpoints."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from tablesmith.api.dependencies import get_db
from tablesmith.api.models import AlterTableRequest, CreateTableRequest
from tablesmith.core.engine import Tablesmith

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tables", tags=["tables"])

Db = Annotated[Tablesmith, Depends(get_db)]


@router.post("/create")
def create_table(req: CreateTableRequest, db: Db) -> dict[str, Any]:
    info = db.create_table(req.table_name, list(req.columns))
    return {"success": True, "tableName": info.name}


@router.post("/alter")
def alter_table(req: AlterTableRequest, db: Db) -> dict[str, Any]:
    column = db.alter_table(req.table_name, req.to_column())
    return {"success": True, "column": column.model_dump()}


@router.get("/list")
def list_tables(db: Db) -> dict[str, Any]:
    return {"success": True, "tables": db.list_tables()}


@router.get("/{name}/schema")
def get_schema(name: str, db: Db) -> dict[str, Any]:
    columns = db.get_schema(name)
    return {"success": True, "tableName": name, "columns": [c.model_dump() for c in columns]}


@router.delete("/{name}")
def delete_table(name: str, db: Db) -> dict[str, Any]:
    dropped = db.drop_table(name)
    return {"success": True, "dropped": dropped}
