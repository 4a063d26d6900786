"""
HTTP surface of the proxy.

The FastAPI app delegates to GameService and renders every
failure as ``{"error": message}`` with the matching status.
"""

from igdb_proxy.api.app import create_app, get_game_service
from igdb_proxy.api.handlers import GameService, error_response

__all__ = [
    "GameService",
    "create_app",
    "error_response",
    "get_game_service",
]
