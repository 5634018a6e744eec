"""WSGI entry point for gunicorn."""

from __future__ import annotations

from subtrack import create_app

app = create_app()
