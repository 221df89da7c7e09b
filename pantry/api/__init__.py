"""
HTTP API for the Pantry service.
"""

from .app import create_app
from .auth import create_access_token, decode_access_token, get_current_user

__all__ = ["create_app", "create_access_token", "decode_access_token", "get_current_user"]
