# tubescout/infrastructure/clients/youtube_api.py
"""
YouTube Data API v3 Client
Async search and comment streaming on top of httpx.

Features:
- Exponential backoff retry on 5xx and network errors
- Search results enriched with view counts via a batched videos.list call
- Comment threads exposed as a lazy async generator (page by page)
- Type-safe response parsing with Pydantic
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from tubescout.app.config import YouTubeAPISettings, get_config
from tubescout.domain.interfaces import SORT_BY_POPULAR, SORT_BY_RECENT
from tubescout.domain.models import WATCH_URL, CommentItem, VideoSummary
from tubescout.services.exceptions import ConfigurationError, YouTubeAPIError

logger = logging.getLogger(__name__)

COMMENT_ORDER = {
    SORT_BY_POPULAR: "relevance",
    SORT_BY_RECENT: "time",
}


# ============================================================================
# Response Models (Type-Safe Data Containers)
# ============================================================================


class VideoSnippet(BaseModel):
    """Video metadata snippet"""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    published_at: Optional[str] = Field(alias="publishedAt", default=None)
    channel_title: Optional[str] = Field(alias="channelTitle", default=None)


class VideoStatistics(BaseModel):
    """Video engagement statistics; the API sends counts as strings"""

    model_config = ConfigDict(populate_by_name=True)

    view_count: Optional[int] = Field(alias="viewCount", default=None)
    like_count: Optional[int] = Field(alias="likeCount", default=None)
    comment_count: Optional[int] = Field(alias="commentCount", default=None)


class VideoResource(BaseModel):
    """videos.list item"""

    id: str
    snippet: VideoSnippet = Field(default_factory=VideoSnippet)
    statistics: VideoStatistics = Field(default_factory=VideoStatistics)

    def to_summary(self) -> VideoSummary:
        return VideoSummary(
            id=self.id,
            title=self.snippet.title,
            url=WATCH_URL.format(video_id=self.id),
            views=self.statistics.view_count,
            uploaded_at=self.snippet.published_at,
        )


class CommentSnippet(BaseModel):
    """Top-level comment metadata"""

    model_config = ConfigDict(populate_by_name=True)

    text_display: str = Field(alias="textDisplay", default="")
    author_display_name: Optional[str] = Field(alias="authorDisplayName", default=None)
    like_count: int = Field(alias="likeCount", default=0)

    def to_item(self) -> CommentItem:
        return CommentItem(
            text=self.text_display,
            author=self.author_display_name,
            likes=self.like_count,
        )


# ============================================================================
# Main API Client
# ============================================================================


class YouTubeAPIClient:
    """
    YouTube Data API v3 Client

    Satisfies both VideoSearchProvider (``search``) and CommentProvider
    (``get_comments``).
    """

    def __init__(
        self,
        settings: Optional[YouTubeAPISettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize YouTube API client

        Args:
            settings: API settings (defaults to global config)
            client: Pre-built httpx client; one is created when omitted
        """
        self.settings = settings or get_config().youtube_api
        self.api_key = self.settings.api_key
        self.base_url = self.settings.base_url.rstrip("/")
        self.max_retries = max(1, self.settings.max_retries)

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=self.settings.request_timeout,
            limits=httpx.Limits(max_keepalive_connections=10),
        )

        if not self.api_key:
            logger.warning("⚠️ YouTube API key not set; API calls will fail")

    async def _request(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Make API request with retry logic

        Args:
            endpoint: API endpoint path (e.g., 'videos', 'search')
            params: Query parameters

        Returns:
            Parsed JSON response

        Raises:
            ConfigurationError: No API key configured
            YouTubeAPIError: Unrecoverable HTTP error or retries exhausted
        """
        if not self.api_key:
            raise ConfigurationError("YouTube API key not configured")

        url = f"{self.base_url}/{endpoint}"
        params = {**params, "key": self.api_key}
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                response = await self.client.get(url, params=params)
                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status == 403:
                    # Quota exceeded, comments disabled or API key invalid
                    raise YouTubeAPIError(
                        f"{endpoint} forbidden: {e.response.text[:200]}", status=status
                    ) from e

                if status < 500:
                    # Client error - don't retry
                    raise YouTubeAPIError(
                        f"{endpoint} client error {status}", status=status
                    ) from e

                last_error = e
                logger.warning(
                    f"⚠️ Server error {status} on {endpoint} "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )

            except httpx.RequestError as e:
                last_error = e
                logger.warning(
                    f"⚠️ Network error on {endpoint}: {e} "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )

            if attempt + 1 < self.max_retries:
                await asyncio.sleep(self.settings.backoff_base * 2**attempt)

        raise YouTubeAPIError(
            f"{endpoint} failed after {self.max_retries} attempts: {last_error}"
        )

    # ========================================================================
    # Search (VideoSearchProvider)
    # ========================================================================

    async def search(
        self, term: str, limit: int = 3, type: str = "video"
    ) -> List[VideoSummary]:
        """
        Search for videos and return summaries with view counts

        Args:
            term: Search query string
            limit: Maximum results to return (1-50)
            type: Result kind; only "video" is supported

        Returns:
            VideoSummary list in search relevance order
        """
        if type != "video":
            raise ValueError(f"Unsupported search type: {type}")

        params = {
            "part": "id",
            "q": term,
            "type": "video",
            "maxResults": max(1, min(limit, 50)),
        }
        response = await self._request("search", params)

        video_ids = [
            item["id"]["videoId"]
            for item in response.get("items", [])
            if item.get("id", {}).get("videoId")
        ]
        if not video_ids:
            return []

        videos = await self.get_videos_batch(video_ids)
        by_id = {video.id: video for video in videos}

        # videos.list does not promise search order
        return [by_id[vid].to_summary() for vid in video_ids if vid in by_id]

    async def get_videos_batch(self, video_ids: List[str]) -> List[VideoResource]:
        """
        Fetch snippet and statistics for up to 50 videos in one request
        """
        if len(video_ids) > 50:
            raise ValueError("Maximum 50 video IDs per batch request")

        params = {"part": "snippet,statistics", "id": ",".join(video_ids)}
        response = await self._request("videos", params)

        return [VideoResource(**item) for item in response.get("items", [])]

    # ========================================================================
    # Comments (CommentProvider)
    # ========================================================================

    async def get_comments(
        self, video_id: str, sort_by: int = SORT_BY_POPULAR
    ) -> AsyncIterator[CommentItem]:
        """
        Stream top-level comments, fetching pages on demand

        The generator ends when the API has no further page; stopping
        iteration early never requests the next page.
        """
        page_token: Optional[str] = None
        order = COMMENT_ORDER.get(sort_by, "relevance")

        while True:
            params = {
                "part": "snippet",
                "videoId": video_id,
                "maxResults": self.settings.comments_page_size,
                "order": order,
                "textFormat": "plainText",
            }
            if page_token:
                params["pageToken"] = page_token

            response = await self._request("commentThreads", params)

            for item in response.get("items", []):
                snippet = item["snippet"]["topLevelComment"]["snippet"]
                yield CommentSnippet(**snippet).to_item()

            page_token = response.get("nextPageToken")
            if not page_token:
                return

    # ========================================================================
    # Utility Methods
    # ========================================================================

    async def aclose(self) -> None:
        """Close HTTP client connection pool if this client created it"""
        if self._owns_client:
            await self.client.aclose()
            logger.info("🔌 YouTube API client closed")
