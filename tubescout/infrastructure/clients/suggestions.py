# tubescout/infrastructure/clients/suggestions.py
"""
Query suggestion client (SuggestionProvider).

Uses the public autocomplete endpoint with the YouTube data source. With
``client=firefox`` the body is plain JSON: ``[query, [suggestion, ...]]``.
"""

import logging
from typing import List, Optional

import httpx

from tubescout.app.config import YouTubeAPISettings, get_config
from tubescout.services.exceptions import YouTubeAPIError

logger = logging.getLogger(__name__)


class SuggestionClient:
    """Fetches YouTube search suggestions for a query"""

    def __init__(
        self,
        settings: Optional[YouTubeAPISettings] = None,
        client: Optional[httpx.AsyncClient] = None,
        language: str = "en",
    ):
        self.settings = settings or get_config().youtube_api
        self.language = language
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=self.settings.request_timeout)

    async def get_suggestions(self, query: str) -> List[str]:
        """
        Get suggested queries, in provider order

        Raises:
            YouTubeAPIError: HTTP failure or an unexpected payload
        """
        params = {"client": "firefox", "ds": "yt", "hl": self.language, "q": query}

        try:
            response = await self.client.get(self.settings.suggest_url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise YouTubeAPIError(
                "suggestion request failed", status=e.response.status_code
            ) from e
        except (httpx.RequestError, ValueError) as e:
            raise YouTubeAPIError(f"suggestion request failed: {e}") from e

        if (
            not isinstance(payload, list)
            or len(payload) < 2
            or not isinstance(payload[1], list)
        ):
            raise YouTubeAPIError("unexpected suggestion payload")

        suggestions = [s for s in payload[1] if isinstance(s, str) and s.strip()]
        logger.debug(f"💡 {len(suggestions)} suggestions for '{query}'")
        return suggestions

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
