from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from nim_proxy.api.services.chat_completions import ChatCompletionsService
from nim_proxy.core.logging import logger
from nim_proxy.core.models_catalog import models_list_payload
from nim_proxy.models.chat import ChatCompletionRequest

router = APIRouter()


def get_chat_completions_service(http_request: Request) -> ChatCompletionsService:
    """Build the service from the config and client stored on the app."""
    state = http_request.app.state
    return ChatCompletionsService(config=state.config, client=state.nim_client)


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "OK", "timestamp": utc_timestamp()}


@router.get("/v1/models")
async def list_models() -> dict:
    logger.debug("Serving static models catalog")
    return models_list_payload()


@router.post("/v1/chat/completions", response_model=None)
async def chat_completions(
    request: ChatCompletionRequest,
    http_request: Request,
    service: ChatCompletionsService = Depends(get_chat_completions_service),
) -> Response:
    return await service.handle(request, http_request)
