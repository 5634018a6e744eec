"""Subscription tracking backend: authentication and session lifecycle.

``create_app`` is re-exported so WSGI servers and the Flask CLI can use
``subtrack:create_app`` directly.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
