"""FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from tablesmith.core.engine import Tablesmith


def get_db(request: Request) -> Tablesmith:
    """The Tablesmith instance the app was created with."""
    db: Tablesmith = request.app.state.db
    return db
