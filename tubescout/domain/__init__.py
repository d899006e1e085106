# tubescout/domain/__init__.py
"""
Domain layer: provider interfaces and the value types that flow between them.

    from tubescout.domain import VideoSummary, CommentProvider, ...
"""
from .interfaces import (  # re-export for convenience
    SuggestionProvider,
    VideoSearchProvider,
    CommentProvider,
    SORT_BY_POPULAR,
    SORT_BY_RECENT,
)
from .models import (
    VideoSummary,
    CommentItem,
    EnrichedVideo,
    Fulfilled,
    Rejected,
    Outcome,
)

__all__ = [
    "SuggestionProvider",
    "VideoSearchProvider",
    "CommentProvider",
    "SORT_BY_POPULAR",
    "SORT_BY_RECENT",
    "VideoSummary",
    "CommentItem",
    "EnrichedVideo",
    "Fulfilled",
    "Rejected",
    "Outcome",
]
