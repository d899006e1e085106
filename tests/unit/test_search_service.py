"""
Unit Tests for SearchService
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from tubescout.app.config import Config
from tubescout.domain.models import CommentItem, VideoSummary
from tubescout.services.comment_fetcher import CommentFetcher
from tubescout.services.exceptions import ValidationError
from tubescout.services.search_service import SearchService, parse_count, rank_videos
from tubescout.api.schemas import NO_RESULTS_MESSAGE


def video(vid, views, title=None, url=None, uploaded_at=None):
    return VideoSummary(id=vid, title=title, url=url, views=views, uploaded_at=uploaded_at)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def mock_suggestion_provider():
    """Suggestion provider returning two suggestions"""
    provider = Mock()
    provider.get_suggestions = AsyncMock(return_value=["cats funny", "cats compilation"])
    return provider


@pytest.fixture
def mock_search_provider():
    """Search provider keyed by term"""
    results = {
        "cats": [video("a", 100), video("b", 5000)],
        "cats funny": [video("c", 300), video("a", 100)],
        "cats compilation": [video("d", 2000), video("e", None)],
    }
    provider = Mock()
    provider.search = AsyncMock(side_effect=lambda term, limit=3, type="video": results.get(term, []))
    provider.results = results
    return provider


@pytest.fixture
def mock_comment_fetcher():
    fetcher = Mock()
    fetcher.fetch_comments = AsyncMock(return_value=["a comment that is long"])
    return fetcher


@pytest.fixture
def search_service(
    config, mock_suggestion_provider, mock_search_provider, mock_comment_fetcher
):
    """Create SearchService with mocked dependencies"""
    return SearchService(
        suggestion_provider=mock_suggestion_provider,
        search_provider=mock_search_provider,
        comment_fetcher=mock_comment_fetcher,
        config=config,
    )


# ============================================================================
# Pipeline
# ============================================================================


class TestSearchPipeline:
    """Test the full search flow"""

    @pytest.mark.asyncio
    async def test_merges_dedupes_and_ranks(self, search_service, mock_search_provider):
        result = await search_service.search("cats")

        ids = [v.id for v in result.videos]
        assert ids == ["b", "d", "c", "a"]
        assert result.query == "cats"
        assert mock_search_provider.search.await_count == 3
        mock_search_provider.search.assert_any_await("cats", limit=3, type="video")

    @pytest.mark.asyncio
    async def test_response_invariants(self, search_service):
        """Unique ids, views descending, bounded length"""
        result = await search_service.search("cats", video_count="3")

        ids = [v.id for v in result.videos]
        views = [v.views for v in result.videos]
        assert len(result.videos) <= 3
        assert len(ids) == len(set(ids))
        assert views == sorted(views, reverse=True)

    @pytest.mark.asyncio
    async def test_enriched_fields_and_defaults(self, search_service, mock_comment_fetcher):
        result = await search_service.search("cats", suggestion_count=0)

        first = result.videos[0]
        assert first.id == "b"
        assert first.title == "Unknown Title"
        assert first.url == "https://youtube.com/watch?v=b"
        assert first.uploaded_at is None
        assert first.comments == ["a comment that is long"]
        mock_comment_fetcher.fetch_comments.assert_any_await("b", limit=15)

    @pytest.mark.asyncio
    async def test_normal_response_shape(self, search_service):
        result = await search_service.search("cats")
        body = result.model_dump(by_alias=True, exclude_unset=True)

        assert set(body) == {"query", "videos"}
        assert set(body["videos"][0]) == {"id", "title", "url", "views", "uploadedAt", "comments"}

    @pytest.mark.asyncio
    async def test_suggestion_failure_uses_original_term(
        self, search_service, mock_suggestion_provider, mock_search_provider
    ):
        mock_suggestion_provider.get_suggestions.side_effect = RuntimeError("down")

        result = await search_service.search("cats")

        mock_search_provider.search.assert_awaited_once_with("cats", limit=3, type="video")
        assert [v.id for v in result.videos] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_failed_term_does_not_fail_request(
        self, search_service, mock_search_provider
    ):
        results = mock_search_provider.results

        async def search(term, limit=3, type="video"):
            if term == "cats funny":
                raise ConnectionError("timeout")
            return results.get(term, [])

        mock_search_provider.search.side_effect = search

        result = await search_service.search("cats")

        assert [v.id for v in result.videos] == ["b", "d", "a"]

    @pytest.mark.asyncio
    async def test_all_searches_fail_returns_empty_message(
        self, search_service, mock_search_provider, mock_comment_fetcher
    ):
        mock_search_provider.search.side_effect = RuntimeError("quota")

        result = await search_service.search("cats", suggestion_count="2", video_count="7")

        assert result.videos == []
        assert result.message == NO_RESULTS_MESSAGE
        assert result.total_videos == 0
        assert result.suggestion_count == 2
        assert result.video_count == 7
        mock_comment_fetcher.fetch_comments.assert_not_called()

    @pytest.mark.asyncio
    async def test_comment_failure_keeps_video(self, search_service, mock_comment_fetcher):
        async def fetch(video_id, limit=30, timeout_ms=None):
            if video_id == "d":
                raise RuntimeError("comments disabled")
            return ["a comment that is long"]

        mock_comment_fetcher.fetch_comments.side_effect = fetch

        result = await search_service.search("cats")

        by_id = {v.id: v for v in result.videos}
        assert by_id["d"].comments == []
        assert by_id["b"].comments == ["a comment that is long"]

    @pytest.mark.asyncio
    async def test_broken_entry_is_dropped(self, search_service, mock_search_provider):
        """A per-item assembly failure removes only that item"""
        broken = VideoSummary(id="z", views=-5)  # negative views fail response validation
        mock_search_provider.search.side_effect = None
        mock_search_provider.search.return_value = [video("a", 10), broken]

        result = await search_service.search("cats", suggestion_count=0)

        assert [v.id for v in result.videos] == ["a"]

    @pytest.mark.asyncio
    async def test_enrichment_concurrency_capped(
        self, search_service, mock_search_provider, mock_comment_fetcher
    ):
        mock_search_provider.search.side_effect = None
        mock_search_provider.search.return_value = [video(f"v{i}", i) for i in range(12)]
        in_flight = 0
        peak = 0

        async def fetch(video_id, limit=30, timeout_ms=None):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.001)
            in_flight -= 1
            return []

        mock_comment_fetcher.fetch_comments.side_effect = fetch

        result = await search_service.search("cats", suggestion_count=0, video_count=12)

        assert len(result.videos) == 12
        assert peak <= 5

    @pytest.mark.asyncio
    async def test_hanging_comments_still_complete(
        self, monkeypatch, mock_suggestion_provider, mock_search_provider
    ):
        """A comment provider that never answers leaves comments empty"""
        monkeypatch.setenv("SEARCH_COMMENT_TIMEOUT_MS", "30")
        config = Config()

        class HangingProvider:
            async def get_comments(self, video_id, sort_by=0):
                await asyncio.sleep(3600)
                yield CommentItem(text="never delivered")

        service = SearchService(
            suggestion_provider=mock_suggestion_provider,
            search_provider=mock_search_provider,
            comment_fetcher=CommentFetcher(HangingProvider(), config=config),
            config=config,
        )

        result = await service.search("cats")

        assert len(result.videos) == 4
        assert all(v.comments == [] for v in result.videos)


# ============================================================================
# Validation & Parameters
# ============================================================================


class TestSearchValidation:
    """Test input validation and clamping"""

    @pytest.mark.asyncio
    async def test_missing_query(self, search_service):
        with pytest.raises(ValidationError) as exc_info:
            await search_service.search(None)
        assert exc_info.value.message == "Missing ?q= parameter"

        with pytest.raises(ValidationError):
            await search_service.search("")

    @pytest.mark.asyncio
    async def test_short_query(self, search_service, mock_search_provider):
        with pytest.raises(ValidationError) as exc_info:
            await search_service.search("  a  ")

        assert exc_info.value.message == "Query must be at least 2 characters long"
        mock_search_provider.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_query_trimmed_and_truncated(self, search_service, mock_suggestion_provider):
        result = await search_service.search("   " + "x" * 150 + "   ", suggestion_count=1)

        assert result.query == "x" * 100
        mock_suggestion_provider.get_suggestions.assert_awaited_once_with("x" * 100)

    @pytest.mark.asyncio
    async def test_suggestion_count_clamped_to_ten(
        self, search_service, mock_suggestion_provider, mock_search_provider
    ):
        mock_suggestion_provider.get_suggestions.return_value = [f"s{i}" for i in range(20)]

        await search_service.search("cats", suggestion_count="999")

        searched = [c.args[0] for c in mock_search_provider.search.await_args_list]
        assert searched == ["cats"] + [f"s{i}" for i in range(10)]

    @pytest.mark.asyncio
    async def test_zero_suggestions_searches_query_only(
        self, search_service, mock_suggestion_provider, mock_search_provider
    ):
        await search_service.search("cats", suggestion_count="0")

        mock_suggestion_provider.get_suggestions.assert_not_called()
        mock_search_provider.search.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_video_count_zero_behaves_as_one(self, search_service):
        result = await search_service.search("cats", video_count="0")
        assert [v.id for v in result.videos] == ["b"]

    @pytest.mark.asyncio
    async def test_duplicate_terms_tolerated(
        self, search_service, mock_suggestion_provider, mock_search_provider
    ):
        mock_suggestion_provider.get_suggestions.return_value = ["cats", "cats"]

        result = await search_service.search("cats")

        assert mock_search_provider.search.await_count == 3
        assert [v.id for v in result.videos] == ["b", "a"]


class TestParseCount:
    """Test lenient count parsing"""

    def test_defaults_and_clamping(self):
        assert parse_count(None, 4, 0, 10) == 4
        assert parse_count("abc", 4, 0, 10) == 4
        assert parse_count("", 15, 1, 50) == 15
        assert parse_count("999", 4, 0, 10) == 10
        assert parse_count("-3", 4, 0, 10) == 0
        assert parse_count("0", 15, 1, 50) == 1

    def test_leading_integer_prefix(self):
        assert parse_count("7abc", 4, 0, 10) == 7
        assert parse_count("3.9", 4, 0, 10) == 3
        assert parse_count(" 12 ", 15, 1, 50) == 12

    def test_int_values(self):
        assert parse_count(8, 4, 0, 10) == 8
        assert parse_count(80, 4, 0, 10) == 10


class TestRankVideos:
    """Test merge / dedupe / rank"""

    def test_first_occurrence_wins(self):
        ranked = rank_videos([[video("a", 10, title="first")], [video("a", 999, title="second")]], 10)

        assert len(ranked) == 1
        assert ranked[0].title == "first"
        assert ranked[0].views == 10

    def test_drops_missing_id_and_missing_views(self):
        ranked = rank_videos(
            [[video(None, 50), video("", 40), video("x", None), video("y", 0), None]], 10
        )

        assert [v.id for v in ranked] == ["y"]

    def test_sorted_and_truncated(self):
        ranked = rank_videos([[video("a", 1), video("b", 3)], [video("c", 2)], []], 2)

        assert [v.id for v in ranked] == ["b", "c"]
