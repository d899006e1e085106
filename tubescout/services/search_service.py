"""
Search Service
Suggestion-expanded search, popularity ranking and comment enrichment
"""

import asyncio
import re
from typing import Dict, List, Optional, Union

from tubescout.app.config import Config
from tubescout.domain.interfaces import SuggestionProvider, VideoSearchProvider
from tubescout.domain.models import EnrichedVideo, VideoSummary
from tubescout.services.base_service import BaseService
from tubescout.services.comment_fetcher import CommentFetcher
from tubescout.services.concurrency import fulfilled_values, run_in_batches
from tubescout.services.exceptions import ValidationError

from tubescout.api.schemas import (
    SearchResponse,
    EnrichedVideoResponse,
    NO_RESULTS_MESSAGE,
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

CountParam = Optional[Union[str, int]]


def parse_count(value: CountParam, default: int, lower: int, upper: int) -> int:
    """
    Parse a count parameter leniently and clamp it to [lower, upper]

    Only the leading integer of a string is read ("12abc" -> 12,
    "3.9" -> 3); anything without one falls back to ``default``.
    """
    if value is None or isinstance(value, bool):
        number = default
    elif isinstance(value, int):
        number = value
    else:
        match = _LEADING_INT.match(str(value))
        number = int(match.group(1)) if match else default

    return min(max(number, lower), upper)


def rank_videos(results: List[List[VideoSummary]], limit: int) -> List[VideoSummary]:
    """
    Merge per-term results into one popularity-ranked list

    Entries without an id or a view count are dropped, duplicates keep
    their first occurrence, and the list is cut to ``limit``.
    """
    unique: Dict[str, VideoSummary] = {}
    for videos in results:
        for video in videos or []:
            if video is None or not video.id:
                continue
            unique.setdefault(video.id, video)

    ranked = [v for v in unique.values() if v.views is not None]
    ranked.sort(key=lambda v: v.views or 0, reverse=True)
    return ranked[:limit]


class SearchService(BaseService):
    """
    Search orchestration service

    Handles:
    - Query validation and parameter clamping
    - Suggestion expansion
    - Concurrent per-term search with per-term failure isolation
    - Merge / dedupe / rank
    - Batched comment enrichment
    """

    def __init__(
        self,
        suggestion_provider: SuggestionProvider,
        search_provider: VideoSearchProvider,
        comment_fetcher: CommentFetcher,
        config: Optional[Config] = None,
    ):
        super().__init__(config=config)
        self.suggestions = suggestion_provider
        self.searcher = search_provider
        self.comment_fetcher = comment_fetcher
        self.settings = self.config.search

    def get_service_name(self) -> str:
        return "search"

    # ========================================================================
    # Request Handling
    # ========================================================================

    async def search(
        self,
        query: Optional[str],
        suggestion_count: CountParam = None,
        video_count: CountParam = None,
    ) -> SearchResponse:
        """
        Run the full search pipeline for one request

        Args:
            query: Raw query string
            suggestion_count: Suggested terms to add (clamped to [0, max])
            video_count: Videos to return (clamped to [1, max])

        Returns:
            SearchResponse with enriched videos, or the empty-result form

        Raises:
            ValidationError: Missing or too-short query
        """
        if not query:
            raise ValidationError("Missing ?q= parameter", field="q")

        s = self.settings
        suggestion_count = parse_count(
            suggestion_count, s.default_suggestion_count, 0, s.max_suggestion_count
        )
        video_count = parse_count(
            video_count, s.default_video_count, 1, s.max_video_count
        )

        sanitized_query = self.sanitize_query(query)

        self.log_info(
            f"🔍 Searching for: {sanitized_query} "
            f"(suggestions: {suggestion_count}, videos: {video_count})"
        )

        terms = await self.build_terms(sanitized_query, suggestion_count)
        results = await self.search_terms(terms)
        ranked = rank_videos(results, video_count)

        if not ranked:
            self.log_info(f"No videos found for: {sanitized_query}")
            return SearchResponse(
                query=sanitized_query,
                suggestion_count=suggestion_count,
                video_count=video_count,
                total_videos=0,
                videos=[],
                message=NO_RESULTS_MESSAGE,
            )

        self.log_info(f"⚡ Processing {len(ranked)} videos...")
        videos = await self.enrich(ranked)

        return SearchResponse(query=sanitized_query, videos=videos)

    def sanitize_query(self, query: str) -> str:
        sanitized = query.strip()[: self.settings.max_query_length]
        if len(sanitized) < self.settings.min_query_length:
            raise ValidationError(
                f"Query must be at least {self.settings.min_query_length} characters long",
                field="q",
            )
        return sanitized

    # ========================================================================
    # Pipeline Steps
    # ========================================================================

    async def build_terms(self, query: str, suggestion_count: int) -> List[str]:
        """Original query first, then up to ``suggestion_count`` suggestions"""
        suggestions: List[str] = []
        if suggestion_count > 0:
            try:
                suggestions = list(await self.suggestions.get_suggestions(query))
            except Exception as e:
                self.log_warning(f"⚠️ Failed to get suggestions: {e}")

        return [query, *suggestions[:suggestion_count]]

    async def search_terms(self, terms: List[str]) -> List[List[VideoSummary]]:
        """Search every term concurrently; a failed term yields []"""
        return list(await asyncio.gather(*(self._search_term(t) for t in terms)))

    async def _search_term(self, term: str) -> List[VideoSummary]:
        try:
            return list(
                await self.searcher.search(
                    term, limit=self.settings.results_per_term, type="video"
                )
            )
        except Exception as e:
            self.log_warning(f'⚠️ Search failed for term "{term}": {e}')
            return []

    async def enrich(self, videos: List[VideoSummary]) -> List[EnrichedVideoResponse]:
        """Attach comments to each video, at most batch_size fetches at a time"""
        outcomes = await run_in_batches(
            videos, self.settings.comment_batch_size, self._enrich_one
        )
        return fulfilled_values(outcomes)

    async def _enrich_one(self, video: VideoSummary) -> Optional[EnrichedVideoResponse]:
        try:
            comments = await self._comments_for(video)
            enriched = EnrichedVideo.from_summary(video, comments)
            return EnrichedVideoResponse.from_domain(enriched)
        except Exception as e:
            self.log_warning(f"⚠️ Failed to process video {video.id}: {e}")
            return None

    async def _comments_for(self, video: VideoSummary) -> List[str]:
        # A failed fetch leaves the video in the result with no comments
        try:
            return await self.comment_fetcher.fetch_comments(
                video.id, limit=self.settings.comment_limit
            )
        except Exception as e:
            self.log_warning(f"⚠️ Comments unavailable for {video.id}: {e}")
            return []
