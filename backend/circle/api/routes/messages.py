"""Message Routes — direct messages for the authenticated user.

Invariants:
    - Every endpoint acts on behalf of the caller; no one reads another pair's messages
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from circle.api.deps import PageParams, get_message_manager, page_params
from circle.core.domain_types import UserId
from circle.core.errors import RequestRejectedError
from circle.infrastructure.auth import get_current_user_id
from circle.schemas.common import Page
from circle.schemas.message import ConversationOut, MessageCreate, MessageOut
from circle.services.manage_messages import MessageManager

router = APIRouter(prefix="/api/v1/messages", tags=["messages"])


@router.get("", response_model=list[ConversationOut])
async def list_conversations(
    user_id: UserId = Depends(get_current_user_id),
    messages: MessageManager = Depends(get_message_manager),
):
    return await messages.get_conversation_partners(user_id)


@router.post("", response_model=MessageOut)
async def send_message(
    body: MessageCreate,
    user_id: UserId = Depends(get_current_user_id),
    messages: MessageManager = Depends(get_message_manager),
):
    message = await messages.send_message(
        user_id, UserId(body.receiver_id), body.content,
    )
    if message is None:
        raise RequestRejectedError()
    return message


@router.get("/{other_id}", response_model=Page[MessageOut])
async def get_conversation(
    other_id: UUID,
    paging: PageParams = Depends(page_params),
    user_id: UserId = Depends(get_current_user_id),
    messages: MessageManager = Depends(get_message_manager),
):
    return await messages.get_conversation(
        user_id, UserId(other_id), paging.page, paging.limit,
    )


@router.post("/{other_id}/read")
async def mark_conversation_read(
    other_id: UUID,
    user_id: UserId = Depends(get_current_user_id),
    messages: MessageManager = Depends(get_message_manager),
):
    marked = await messages.mark_conversation_read(user_id, UserId(other_id))
    return {"marked": marked}
