"""Single-shot chat endpoint (DashScope)."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from chatrelay.core.providers import (
    EmptyCompletion,
    ProviderNotConfigured,
    UpstreamError,
    UpstreamTimeout,
)

from .deps import CompletionChatServiceDep
from .models import ChatRequest, CompletionResponse, error_response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post("/dashscope", response_model=CompletionResponse)
async def dashscope_completion(
    chat_request: ChatRequest,
    chat_service: CompletionChatServiceDep,
) -> CompletionResponse | JSONResponse:
    """Answer the latest user turn with one DashScope completion.

    Every failure becomes a JSON error response; nothing escapes to the
    server.
    """
    try:
        content = await chat_service.complete(chat_request.messages)
    except ProviderNotConfigured:
        raise
    except UpstreamTimeout as e:
        return error_response(
            504,
            error="DashScope API request timed out",
            message=f"The API did not respond within {e.timeout_seconds:g} seconds",
        )
    except UpstreamError as e:
        return error_response(
            e.status_code,
            error="Failed to get response from DashScope",
            status=e.status_code,
            request_id=e.request_id,
            details=e.provider_message,
        )
    except EmptyCompletion as e:
        return error_response(
            500, error="No text output from DashScope", response=e.payload
        )
    except Exception as e:
        logger.exception("API error")
        return error_response(500, error="Internal server error", message=str(e))

    return CompletionResponse(content=content)
