"""REST API for Tablesmith (FastAPI)."""

from tablesmith.api.app import create_app

__all__ = ["create_app"]
