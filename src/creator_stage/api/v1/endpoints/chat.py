# src/creator_stage/api/v1/endpoints/chat.py
"""Direct message endpoints for the Creator Stage API."""

from __future__ import annotations

from fastapi import APIRouter, status

from creator_stage.schemas.chat import ConversationResponse, MessageCreate, MessageResponse
from creator_stage.schemas.common import StatusMessage
from creator_stage.services.chat import ConversationSummary, to_conversation_response

from ..dependencies import ChatServiceDep, CurrentUserDep, StorageDep

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/start/{user_id}", response_model=ConversationResponse)
async def start_conversation(
    user_id: str,
    current_user: CurrentUserDep,
    chat: ChatServiceDep,
    storage: StorageDep,
) -> ConversationResponse:
    """Open (or reuse) the conversation between the caller and ``user_id``."""
    conversation = chat.start_conversation(current_user.id, user_id)
    summary = ConversationSummary(
        conversation=conversation,
        other_participant=conversation.other_participant(current_user.id),
        last_message=None,
    )
    return to_conversation_response(summary, storage)


@router.get("/conversations", response_model=list[ConversationResponse])
async def list_conversations(
    current_user: CurrentUserDep,
    chat: ChatServiceDep,
    storage: StorageDep,
) -> list[ConversationResponse]:
    """List the caller's conversations, most recently active first."""
    return [
        to_conversation_response(summary, storage)
        for summary in chat.get_conversations(current_user.id)
    ]


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: str,
    current_user: CurrentUserDep,
    chat: ChatServiceDep,
) -> list[MessageResponse]:
    """Return all messages in order and mark the other party's as read."""
    messages = chat.get_messages(conversation_id, current_user.id)
    return [MessageResponse.model_validate(message) for message in messages]


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    conversation_id: str,
    payload: MessageCreate,
    current_user: CurrentUserDep,
    chat: ChatServiceDep,
) -> MessageResponse:
    message = chat.send_message(current_user.id, conversation_id, payload.text)
    return MessageResponse.model_validate(message)


@router.post("/{conversation_id}/typing", response_model=StatusMessage)
async def typing(
    conversation_id: str,
    current_user: CurrentUserDep,
    chat: ChatServiceDep,
) -> StatusMessage:
    chat.send_typing(current_user.id, conversation_id)
    return StatusMessage(message="ok")
