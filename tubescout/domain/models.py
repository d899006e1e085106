# tubescout/domain/models.py
"""
Domain value types.

VideoSummary and CommentItem are produced by the provider adapters;
EnrichedVideo is the unit the search endpoint returns. Outcome is the
settled result of one scheduled task (see services.concurrency).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

T = TypeVar("T")

DEFAULT_TITLE = "Unknown Title"
WATCH_URL = "https://youtube.com/watch?v={video_id}"


@dataclass(frozen=True)
class VideoSummary:
    """
    A search hit as returned by a VideoSearchProvider.

    ``views`` is None when the provider did not report a view count;
    such entries never reach ranking.
    """

    id: Optional[str]
    title: Optional[str] = None
    url: Optional[str] = None
    views: Optional[int] = None
    uploaded_at: Optional[str] = None


@dataclass(frozen=True)
class CommentItem:
    text: str
    author: Optional[str] = None
    likes: int = 0


@dataclass
class EnrichedVideo:
    """VideoSummary with defaults applied plus a bounded comment sample"""

    id: str
    title: str
    url: str
    views: int
    uploaded_at: Optional[str]
    comments: List[str] = field(default_factory=list)

    @classmethod
    def from_summary(
        cls, video: VideoSummary, comments: Optional[List[str]] = None
    ) -> "EnrichedVideo":
        return cls(
            id=video.id,
            title=video.title or DEFAULT_TITLE,
            url=video.url or WATCH_URL.format(video_id=video.id),
            views=video.views or 0,
            uploaded_at=video.uploaded_at or None,
            comments=list(comments or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the public JSON shape"""
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "views": self.views,
            "uploadedAt": self.uploaded_at,
            "comments": list(self.comments),
        }


@dataclass(frozen=True)
class Fulfilled(Generic[T]):
    value: T


@dataclass(frozen=True)
class Rejected:
    error: BaseException


Outcome = Union[Fulfilled[T], Rejected]


__all__ = [
    "VideoSummary",
    "CommentItem",
    "EnrichedVideo",
    "Fulfilled",
    "Rejected",
    "Outcome",
    "DEFAULT_TITLE",
    "WATCH_URL",
]
