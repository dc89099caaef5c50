"""Streaming chat endpoint (DeepSeek)."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse, StreamingResponse

from chatrelay.core.providers import ProviderNotConfigured, UpstreamError

from .deps import StreamingChatServiceDep
from .models import ChatRequest, error_response
from .streaming import sse_relay

logger = logging.getLogger(__name__)

STREAMING_RESPONSE_MEDIA_TYPE = "text/event-stream"
STREAMING_RESPONSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

router = APIRouter(tags=["chat"])


@router.post("/chat", response_model=None)
async def chat(
    chat_request: ChatRequest,
    chat_service: StreamingChatServiceDep,
) -> StreamingResponse | JSONResponse:
    """
    Relay the conversation to DeepSeek and stream the reply.

    The body is a stream of Server-Sent Events::

        data: {"content": "<delta>"}

        data: [DONE]

    Upstream failures detected before streaming starts keep the
    upstream status code with a generic ``{"error"}`` body.
    """
    try:
        upstream = await chat_service.open(chat_request.messages)
    except ProviderNotConfigured:
        raise
    except UpstreamError as e:
        return error_response(
            e.status_code, error="Failed to get response from DeepSeek"
        )
    except Exception:
        logger.exception("API error")
        return error_response(500, error="Internal server error")

    return StreamingResponse(
        sse_relay(upstream, provider=chat_service.chat_service_name),
        media_type=STREAMING_RESPONSE_MEDIA_TYPE,
        headers=STREAMING_RESPONSE_HEADERS,
    )
