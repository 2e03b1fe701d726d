"""HTTP API for the customer care assistant."""
from .app import create_app

__all__ = ["create_app"]
