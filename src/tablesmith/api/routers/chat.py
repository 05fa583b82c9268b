"""Chat endpoint."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from tablesmith.api.dependencies import get_db
from tablesmith.api.models import ChatRequest
from tablesmith.core.engine import Tablesmith

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

Db = Annotated[Tablesmith, Depends(get_db)]


@router.post("/chat")
def chat(req: ChatRequest, db: Db) -> dict[str, Any]:
    logger.info(f"Chat request (table={req.table_name or '*'}): {req.message[:80]}")
    answer = db.chat(
        req.message,
        table_name=req.table_name,
        history=list(req.chat_history),
        top_k=req.top_k,
    )
    body: dict[str, Any] = {"success": True, "response": answer.response, "tables": answer.tables}
    if answer.sql:
        body["sql"] = answer.sql
    return body
