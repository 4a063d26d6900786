"""
IGDB Proxy.

Backend proxy that keeps Twitch credentials off the browser while
serving ranked IGDB game searches and recent releases.
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
