"""
ASGI entry point for FriendSocial.

Re-exports the FastAPI app from friendsocial/api/main.py for ASGI servers.
"""

from friendsocial.api.main import app

__all__ = ["app"]
