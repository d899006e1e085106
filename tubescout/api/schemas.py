"""
API Schemas
Response models for the search endpoint
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tubescout.domain.models import EnrichedVideo

NO_RESULTS_MESSAGE = "No videos found for the given query"
SERVER_ERROR = "Internal server error occurred while processing your request"
GENERIC_ERROR_MESSAGE = "Please try again later"


class EnrichedVideoResponse(BaseModel):
    """One ranked video with its comment sample"""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    url: str
    views: int = Field(ge=0)
    uploaded_at: Optional[str] = Field(alias="uploadedAt")
    comments: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, video: EnrichedVideo) -> "EnrichedVideoResponse":
        return cls.model_validate(video.to_dict())


class SearchResponse(BaseModel):
    """
    Search result body

    Only ``query`` and ``videos`` are set on a normal response; the
    empty-result form also sets the echo fields and ``message``. The
    router serializes with ``exclude_unset`` so each form keeps its shape.
    """

    model_config = ConfigDict(populate_by_name=True)

    query: str
    suggestion_count: Optional[int] = Field(default=None, alias="suggestionCount")
    video_count: Optional[int] = Field(default=None, alias="videoCount")
    total_videos: Optional[int] = Field(default=None, alias="totalVideos")
    videos: List[EnrichedVideoResponse] = Field(default_factory=list)
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str


class ServerErrorResponse(BaseModel):
    error: str = SERVER_ERROR
    message: str = GENERIC_ERROR_MESSAGE


def server_error_body(exc: BaseException, expose_details: bool) -> dict:
    """500 body; the exception text is only included when expose_details is set"""
    return ServerErrorResponse(
        message=str(exc) if expose_details else GENERIC_ERROR_MESSAGE
    ).model_dump()
