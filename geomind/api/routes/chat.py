"""Chat endpoints for the GeoMind API.

Submitting returns at once with the ids of the user message and its
placeholder; clients poll the history until the placeholder stops loading.
"""

import structlog
from fastapi import APIRouter, Depends, status

from geomind.api.dependencies import get_controller
from geomind.api.models import ChatHistoryResponse, ChatSubmission, ChatSubmissionResponse
from geomind.controller.app_controller import AppController

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/chat", tags=["Chat"])


@router.get(
    "/messages",
    response_model=ChatHistoryResponse,
    summary="Conversation history",
)
async def list_messages(
    controller: AppController = Depends(get_controller),
) -> ChatHistoryResponse:
    return ChatHistoryResponse(
        messages=controller.chat.messages,
        pending=len(controller.chat.pending_ids),
    )


@router.post(
    "/messages",
    response_model=ChatSubmissionResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Send a chat message",
    description="Blank messages are ignored and reported with accepted=false.",
)
async def submit_message(
    submission: ChatSubmission,
    controller: AppController = Depends(get_controller),
) -> ChatSubmissionResponse:
    turn = controller.submit_chat(submission.text)
    if turn is None:
        return ChatSubmissionResponse(accepted=False)
    return ChatSubmissionResponse(
        accepted=True,
        message_id=turn.user_message.id,
        placeholder_id=turn.placeholder_id,
    )


@router.delete(
    "/messages",
    response_model=ChatHistoryResponse,
    summary="Start a new conversation",
)
async def reset_messages(
    controller: AppController = Depends(get_controller),
) -> ChatHistoryResponse:
    controller.chat.reset()
    return ChatHistoryResponse(
        messages=controller.chat.messages,
        pending=len(controller.chat.pending_ids),
    )
