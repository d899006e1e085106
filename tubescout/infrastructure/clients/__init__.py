# tubescout/infrastructure/clients/__init__.py
"""API Clients"""

from .youtube_api import YouTubeAPIClient
from .suggestions import SuggestionClient

__all__ = [
    "YouTubeAPIClient",
    "SuggestionClient",
]
