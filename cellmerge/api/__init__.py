"""
API Module - HTTP interface for map clients.

A client (web map, mobile app):
1. Creates a session
2. Sends steps or location fixes
3. Sends clicks on nearby cells
4. Fetches the visible cells and redraws

All state is session-scoped and in memory.
"""

from .service import APIService
from .app import create_app

__all__ = [
    "APIService",
    "create_app",
]
