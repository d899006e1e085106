"""
Comment Fetcher
Best-effort comment sampling: bounded count, length filter, hard timeout
"""

import asyncio
from contextlib import aclosing
from typing import List, Optional, Set

from tubescout.app.config import Config
from tubescout.domain.interfaces import CommentProvider, SORT_BY_POPULAR
from tubescout.services.base_service import BaseService


class CommentFetcher(BaseService):
    """
    Wraps a CommentProvider so that callers always get a list back.

    Provider errors and timeouts degrade to an empty list.
    """

    def __init__(
        self, comment_provider: CommentProvider, config: Optional[Config] = None
    ):
        super().__init__(config=config)
        self.provider = comment_provider
        self.min_length = self.config.search.min_comment_length
        self.default_timeout_ms = self.config.search.comment_timeout_ms
        self._pending: Set["asyncio.Task[List[str]]"] = set()

    def get_service_name(self) -> str:
        return "comments"

    async def fetch_comments(
        self,
        video_id: str,
        limit: int = 30,
        timeout_ms: Optional[int] = None,
    ) -> List[str]:
        """
        Collect up to ``limit`` popular comments longer than the minimum length

        Args:
            video_id: Video to read comments from
            limit: Maximum comments returned (>= 0)
            timeout_ms: Wall-clock budget for provider setup plus iteration

        Returns:
            Comment texts in provider order; empty on failure or timeout
        """
        if timeout_ms is None:
            timeout_ms = self.default_timeout_ms
        self.validate_non_negative(limit, "limit")
        self.validate_positive(timeout_ms, "timeout_ms")

        task = asyncio.ensure_future(self._collect(video_id, limit))
        self._pending.add(task)
        task.add_done_callback(self._release)

        try:
            done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if not done:
            # Cancelled but not awaited; provider teardown finishes in the background
            task.cancel()
            self.log_warning(
                f"⚠️ Failed to get comments for {video_id}: "
                f"Comment fetch timeout after {timeout_ms}ms"
            )
            return []

        try:
            comments = task.result()
        except Exception as e:
            self.log_warning(f"⚠️ Failed to get comments for {video_id}: {e}")
            return []

        self.log_info(f"💬 {len(comments)} comments for {video_id}")
        return comments

    def _release(self, task: "asyncio.Task[List[str]]") -> None:
        self._pending.discard(task)
        # Retrieve the error so it is not reported as unhandled
        if not task.cancelled() and task.exception() is not None:
            self.log_debug(f"Comment fetch ended with: {task.exception()}")

    async def _collect(self, video_id: str, limit: int) -> List[str]:
        comments: List[str] = []
        if limit == 0:
            return comments

        stream = self.provider.get_comments(video_id, SORT_BY_POPULAR)
        if asyncio.iscoroutine(stream):
            stream = await stream

        async with aclosing(stream) as items:
            async for comment in items:
                text = comment.text or ""
                # len() counts code points, not UTF-16 units
                if len(text) > self.min_length:
                    comments.append(text)
                if len(comments) >= limit:
                    break

        return comments
