"""
Search API Router
The single query-expanded search endpoint
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from tubescout.app.config import Config
from tubescout.app.dependencies import get_app_config, get_search_service
from tubescout.services import SearchService, ServiceError, error_to_http_status
from tubescout.api.schemas import (
    ErrorResponse,
    SearchResponse,
    ServerErrorResponse,
    server_error_body,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Search"])


@router.get(
    "/search",
    response_model=SearchResponse,
    response_model_exclude_unset=True,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ServerErrorResponse},
    },
)
async def search(
    q: Optional[str] = Query(None, description="Search query"),
    suggestion_count: Optional[str] = Query(
        None, alias="suggestionCount", description="Suggested terms to add (0-10)"
    ),
    video_count: Optional[str] = Query(
        None, alias="videoCount", description="Videos to return (1-50)"
    ),
    service: SearchService = Depends(get_search_service),
    config: Config = Depends(get_app_config),
):
    """
    Search videos for a query and its suggestions, ranked by views

    - **q**: Query, trimmed and cut to 100 characters (min 2)
    - **suggestionCount**: Suggestion terms searched alongside q (default 4)
    - **videoCount**: Maximum videos returned (default 15)
    """
    try:
        return await service.search(q, suggestion_count, video_count)

    except ServiceError as e:
        status_code = error_to_http_status(e)
        if status_code >= 500:
            logger.error(f"❌ Search failed: {e}")
        else:
            logger.info(f"Rejected search request: {e.message}")
        return JSONResponse(status_code=status_code, content=e.to_dict())

    except Exception as e:
        logger.exception(f"❌ Unexpected error in /search: {e}")
        return JSONResponse(
            status_code=500,
            content=server_error_body(e, expose_details=config.is_development),
        )
