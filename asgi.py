"""
asgi.py -- ASGI entry point for Travel Globe.

Run with:  uvicorn asgi:app --reload
           uvicorn asgi:app --host 0.0.0.0 --port 5000
"""

from api.main import app

__all__ = ["app"]
