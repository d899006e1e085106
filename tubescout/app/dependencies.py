"""
Service Dependency Injection
Provider/service construction and FastAPI dependency providers
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from tubescout.app.config import Config, get_config
from tubescout.infrastructure.clients import SuggestionClient, YouTubeAPIClient
from tubescout.services import CommentFetcher, SearchService


@dataclass
class ServiceContainer:
    """Long-lived objects created at startup and closed at shutdown"""

    youtube_client: YouTubeAPIClient
    suggestion_client: SuggestionClient
    search_service: SearchService

    async def aclose(self) -> None:
        await self.youtube_client.aclose()
        await self.suggestion_client.aclose()


def build_services(config: Optional[Config] = None) -> ServiceContainer:
    """
    Wire the concrete clients into the search service

    The YouTube client serves as both the search and the comment provider.
    """
    config = config or get_config()

    youtube_client = YouTubeAPIClient(settings=config.youtube_api)
    suggestion_client = SuggestionClient(settings=config.youtube_api)

    search_service = SearchService(
        suggestion_provider=suggestion_client,
        search_provider=youtube_client,
        comment_fetcher=CommentFetcher(youtube_client, config=config),
        config=config,
    )

    return ServiceContainer(
        youtube_client=youtube_client,
        suggestion_client=suggestion_client,
        search_service=search_service,
    )


def get_search_service(request: Request) -> SearchService:
    """
    Dependency provider for SearchService

    Usage in FastAPI:
        @router.get("/search")
        async def search(service: SearchService = Depends(get_search_service)):
            ...
    """
    return request.app.state.services.search_service


def get_app_config() -> Config:
    return get_config()
