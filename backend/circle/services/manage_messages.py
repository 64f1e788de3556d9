"""Message Manager — direct messages and the conversations derived from them.

Invariants:
    - A user never messages themselves
    - Only the receiver's side of a conversation is ever marked read
"""

from sqlalchemy.ext.asyncio import AsyncSession

from circle.core.domain_types import UserId, is_blank
from circle.core.pagination import page_offset, total_pages
from circle.models.message import Message
from circle.repositories.message_store import MessageStore
from circle.repositories.user_store import UserStore
from circle.schemas.common import Page
from circle.schemas.message import ConversationOut, MessageOut


class MessageManager:
    """Messaging operations for one unit of work."""

    def __init__(self, db: AsyncSession):
        self.messages = MessageStore(db)
        self.users = UserStore(db)

    async def send_message(
        self, sender_id: UserId, receiver_id: UserId, content: str,
    ) -> MessageOut | None:
        if is_blank(content) or sender_id == receiver_id:
            return None
        if await self.users.find(receiver_id) is None:
            return None

        message = self.messages.add(
            Message(sender_id=sender_id, receiver_id=receiver_id, content=content),
        )
        if not await self.messages.commit("send_message"):
            return None
        return MessageOut.model_validate(message)

    async def get_conversation(
        self, user_id: UserId, other_id: UserId, page: int, limit: int,
    ) -> Page[MessageOut]:
        """Messages exchanged with other_id, newest first."""
        rows = await self.messages.conversation_page(
            user_id, other_id, page_offset(page, limit), limit,
        )
        count = await self.messages.count_conversation(user_id, other_id)
        return Page[MessageOut](
            data=[MessageOut.model_validate(m) for m in rows],
            count=count,
            pages=total_pages(count, limit),
        )

    async def mark_conversation_read(self, user_id: UserId, other_id: UserId) -> int:
        """Mark everything other_id sent to user_id as read. Returns rows touched."""
        marked = await self.messages.mark_read(user_id, other_id)
        if not await self.messages.commit("mark_conversation_read"):
            return 0
        return marked

    async def get_conversation_partners(self, user_id: UserId) -> list[ConversationOut]:
        rows = await self.messages.conversation_partners(user_id)
        partners = await self.users.summaries(pid for pid, _, _ in rows)
        return [
            ConversationOut(
                partner=partners[pid], last_message_at=last_at, unread_count=unread,
            )
            for pid, last_at, unread in rows
            if pid in partners
        ]
