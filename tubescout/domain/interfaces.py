# tubescout/domain/interfaces.py
"""
Provider interfaces (Protocols) consumed by the search orchestration.

Concrete clients satisfy these via duck typing; there is no inheritance
requirement. Tests substitute AsyncMock objects or small fakes.
"""
from __future__ import annotations

from typing import AsyncIterator, List, Protocol, runtime_checkable

from tubescout.domain.models import CommentItem, VideoSummary

SORT_BY_POPULAR = 0
SORT_BY_RECENT = 1


@runtime_checkable
class SuggestionProvider(Protocol):
    """Query string -> ordered suggested query strings."""

    async def get_suggestions(self, query: str) -> List[str]: ...


@runtime_checkable
class VideoSearchProvider(Protocol):
    """Search term -> video summaries, at most ``limit`` of them."""

    async def search(
        self, term: str, limit: int = 3, type: str = "video"
    ) -> List[VideoSummary]: ...


@runtime_checkable
class CommentProvider(Protocol):
    """
    Video id -> lazy, unbounded stream of comments.

    Implementations are async generators; the consumer decides when to
    stop and may cancel mid-iteration.
    """

    def get_comments(
        self, video_id: str, sort_by: int = SORT_BY_POPULAR
    ) -> AsyncIterator[CommentItem]: ...
