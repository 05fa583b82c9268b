"""FastAPI application factory."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tablesmith.api.errors import register_error_handlers
from tablesmith.api.routers import chat, context, data, tables
from tablesmith.core.engine import Tablesmith


def create_app(db: Tablesmith, cors_origins: list[str] | None = None) -> FastAPI:
    """Create the REST app around an existing Tablesmith instance.

    Args:
        db: Engine shared by all requests
        cors_origins: Allowed browser origins (defaults to any)

    Returns:
        Configured FastAPI application
    """
    from tablesmith import __version__

    app = FastAPI(title="Tablesmith API", version=__version__)
    app.state.db = db
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(tables.router)
    app.include_router(data.router)
    app.include_router(context.router)
    app.include_router(context.search_router)
    app.include_router(chat.router)

    @app.get("/health")
    def health() -> dict[str, Any]:
        # Raises DatabaseConnectionError (500) when the database is unreachable
        db.connection.test_connection()
        return {"success": True, "status": "ok", "database": db.connection.dialect}

    return app
