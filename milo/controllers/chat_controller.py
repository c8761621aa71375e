"""API controller for the chat widget."""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from loguru import logger

from ..models.chat_response import ChatResponse
from ..models.enums import RequestErrorKind
from ..services.chat_service import ChatService, get_chat_service
from ..services.conversation_logger import ConversationLogger, get_conversation_logger
from ..utils.error_handler import MiloError, RequestError
from ..utils.helpers import request_info

router = APIRouter(prefix="", tags=["Chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat_endpoint(
    request: Request,
    background_tasks: BackgroundTasks,
    service: ChatService = Depends(get_chat_service),
    conversation_logger: ConversationLogger = Depends(get_conversation_logger),
) -> ChatResponse:
    """Answer one chat turn from the widget.

    The body is ``{"sessionId": str, "messages": [{"role", "content"}]}``.
    Validation and provider failures are turned into 400/500/503 responses
    by the registered exception handlers.  The turn is logged only after a
    successful completion, as a background task that runs once the
    response has been sent.
    """
    try:
        body = await request.json()
    except ValueError as exc:
        raise RequestError(RequestErrorKind.MALFORMED_MESSAGES, "Request body must be valid JSON") from exc

    try:
        valid, text = await service.reply(body)
    except MiloError:
        raise
    except Exception as exc:
        logger.exception("Unhandled exception during chat processing")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from exc

    background_tasks.add_task(
        conversation_logger.log,
        valid.session_id,
        list(valid.messages),
        text,
        request_info(request),
    )
    return ChatResponse(message=text)
