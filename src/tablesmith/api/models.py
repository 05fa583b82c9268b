"""Request bodies for the REST API.

Field names follow the camelCase used by browser clients; Python code can
also populate them by their snake_case names.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tablesmith.core.types import ChatMessage, ColumnSpec


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateTableRequest(ApiModel):
    """POST /tables/create"""

    table_name: str = Field(..., alias="tableName")
    columns: list[ColumnSpec] = Field(default_factory=list)


class AlterTableRequest(ApiModel):
    """POST /tables/alter"""

    table_name: str = Field(..., alias="tableName")
    column_name: str = Field(..., alias="columnName")
    column_type: str = Field(..., alias="columnType")
    nullable: bool = True

    def to_column(self) -> ColumnSpec:
        return ColumnSpec(name=self.column_name, type=self.column_type, nullable=self.nullable)


class InsertRowRequest(ApiModel):
    """POST /data/add"""

    table_name: str = Field(..., alias="tableName")
    data: dict[str, Any]


class BulkInsertRequest(ApiModel):
    """POST /data/bulk-add"""

    table_name: str = Field(..., alias="tableName")
    data: list[dict[str, Any]]


class SaveContextRequest(ApiModel):
    """POST /context"""

    table_name: str = Field(..., alias="tableName")
    description: str


class ChatRequest(ApiModel):
    """POST /chat"""

    message: str
    table_name: str | None = Field(default=None, alias="tableName")
    chat_history: list[ChatMessage] = Field(default_factory=list, alias="chatHistory")
    top_k: int = Field(default=3, ge=1, le=20, alias="topK")
