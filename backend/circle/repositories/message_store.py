"""Message Store — conversations derived from (sender, receiver) pairs.

Invariants:
    - A conversation between a and b is every message with {sender, receiver} == {a, b}
    - conversation_partners computes one row per partner in a single grouped query
      over a per-message subquery (the partner CASE is grouped by name, not re-bound)
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ColumnElement, and_, case, func, or_, select, update

from circle.models.message import Message
from circle.repositories.base import BaseStore


def _between(a: UUID, b: UUID) -> ColumnElement[bool]:
    return or_(
        and_(Message.sender_id == a, Message.receiver_id == b),
        and_(Message.sender_id == b, Message.receiver_id == a),
    )


class MessageStore(BaseStore):

    def add(self, message: Message) -> Message:
        self.db.add(message)
        return message

    async def conversation_page(
        self, a: UUID, b: UUID, offset: int, limit: int,
    ) -> list[Message]:
        result = await self.db.execute(
            select(Message)
            .where(_between(a, b))
            .order_by(Message.sent_at.desc(), Message.id)
            .offset(offset)
            .limit(limit),
        )
        return list(result.scalars().all())

    async def count_conversation(self, a: UUID, b: UUID) -> int:
        return await self.db.scalar(
            select(func.count()).select_from(Message).where(_between(a, b)),
        ) or 0

    async def mark_read(self, receiver_id: UUID, sender_id: UUID) -> int:
        result = await self.db.execute(
            update(Message)
            .where(
                Message.receiver_id == receiver_id,
                Message.sender_id == sender_id,
                Message.is_read.is_(False),
            )
            .values(is_read=True),
        )
        return result.rowcount

    async def conversation_partners(
        self, user_id: UUID,
    ) -> list[tuple[UUID, datetime, int]]:
        """(partner_id, last_message_at, unread_count), most recent first."""
        partner = case(
            (Message.sender_id == user_id, Message.receiver_id),
            else_=Message.sender_id,
        )
        unread = case(
            (and_(Message.receiver_id == user_id, Message.is_read.is_(False)), 1),
            else_=0,
        )
        per_message = (
            select(
                partner.label("partner_id"),
                Message.sent_at.label("sent_at"),
                unread.label("unread"),
            )
            .where(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
            .subquery()
        )
        last_at = func.max(per_message.c.sent_at)
        result = await self.db.execute(
            select(per_message.c.partner_id, last_at, func.sum(per_message.c.unread))
            .group_by(per_message.c.partner_id)
            .order_by(last_at.desc()),
        )
        return [(pid, at, int(n or 0)) for pid, at, n in result.all()]
