"""HTTP API layer -- FastAPI app factory and correction routes."""

from selic.api.app import create_app

__all__ = ["create_app"]
