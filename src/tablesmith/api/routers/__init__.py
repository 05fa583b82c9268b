"""API routers."""

from tablesmith.api.routers import chat, context, data, tables

__all__ = ["chat", "context", "data", "tables"]
