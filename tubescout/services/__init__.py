"""
Services Package
Business logic layer for TubeScout
"""

from .base_service import BaseService
from .comment_fetcher import CommentFetcher
from .concurrency import run_in_batches, fulfilled_values
from .search_service import SearchService, parse_count, rank_videos
from .exceptions import (
    ServiceError,
    ValidationError,
    ExternalServiceError,
    YouTubeAPIError,
    ConfigurationError,
    error_to_http_status,
)

__all__ = [
    # Base Classes
    "BaseService",

    # Services
    "CommentFetcher",
    "SearchService",

    # Helpers
    "run_in_batches",
    "fulfilled_values",
    "parse_count",
    "rank_videos",

    # Exceptions
    "ServiceError",
    "ValidationError",
    "ExternalServiceError",
    "YouTubeAPIError",
    "ConfigurationError",
    "error_to_http_status",
]
