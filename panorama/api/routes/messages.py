"""Messages endpoint returning classified support channel messages.

Each request reads the latest channel messages from Slack and classifies them
with Gemini. Either the full enriched list or a single error is returned.
"""

from typing import List, Union

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from panorama.api.dependencies import get_http_client, get_settings
from panorama.api.models import EnrichedMessageResponse, ErrorResponse
from panorama.core.config import Settings
from panorama.core.errors import PanoramaError
from panorama.core.pipeline import PanoramaPipeline

router = APIRouter()

ERROR_SUMMARY = "Failed to process the request."


@router.get(
    "/api/messages",
    response_model=List[EnrichedMessageResponse],
    responses={500: {"model": ErrorResponse}},
    tags=["Messages"],
)
async def list_messages(
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> Union[List[EnrichedMessageResponse], JSONResponse]:
    """Fetch and classify the latest support channel messages.

    Example:
        GET /api/messages
        Response:
        [
            {
                "id": "1700000000.000100",
                "author": "U012AB3CD",
                "text": "tool is broken",
                "timestamp": "2023-11-14T22:13:20.000Z",
                "category": "Problema na Ferramenta",
                "topic": "crash"
            }
        ]
    """
    logger.info("Received request for /api/messages")
    pipeline = PanoramaPipeline.from_settings(settings, http_client)

    try:
        enriched = await pipeline.run()
    except PanoramaError as e:
        logger.error(f"Failed to process /api/messages: {e.details}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=ERROR_SUMMARY, details=e.details).model_dump(),
        )

    return [EnrichedMessageResponse(**message.to_dict()) for message in enriched]
