from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, case, and_, or_
from sqlalchemy.orm import aliased
from hirely.database import get_db
from hirely.models import Message, User
from hirely.schemas import (
    MessageCreate,
    MessageResponse,
    MessageSentResponse,
    ConversationSummary,
    ChatMessage,
)
from hirely.auth import Identity, get_current_identity
from hirely.errors import NotFound

router = APIRouter()


@router.post("", response_model=MessageSentResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    payload: MessageCreate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    if await db.get(User, payload.receiver_id) is None:
        raise NotFound("Receiver not found.")

    message = Message(
        sender_id=identity.id,
        receiver_id=payload.receiver_id,
        content=payload.content,
        job_id=payload.job_id,
        is_read=False,
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)

    return MessageSentResponse(
        message="Message sent successfully!",
        data=MessageResponse.model_validate(message),
    )


@router.get("/conversations", response_model=list[ConversationSummary])
async def list_conversations(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """One entry per participant: the latest message either way plus unread count."""
    me = identity.id
    participant = case(
        (Message.sender_id == me, Message.receiver_id),
        else_=Message.sender_id,
    )

    # Ids grow with insertion, so max(id) is the latest message per participant
    latest = (
        select(
            participant.label("participant_id"),
            func.max(Message.id).label("last_message_id"),
        )
        .where(or_(Message.sender_id == me, Message.receiver_id == me))
        .group_by(participant)
        .subquery()
    )

    unread = (
        select(
            Message.sender_id.label("participant_id"),
            func.count(Message.id).label("unread_count"),
        )
        .where(Message.receiver_id == me, Message.is_read.is_(False))
        .group_by(Message.sender_id)
        .subquery()
    )

    result = await db.execute(
        select(
            Message,
            User.id.label("participant_id"),
            User.name.label("participant_name"),
            User.avatar_url.label("participant_avatar"),
            func.coalesce(unread.c.unread_count, 0).label("unread_count"),
        )
        .join(latest, Message.id == latest.c.last_message_id)
        .join(User, User.id == latest.c.participant_id)
        .outerjoin(unread, unread.c.participant_id == latest.c.participant_id)
        .order_by(Message.sent_at.desc(), Message.id.desc())
    )

    conversations = []
    for row in result.all():
        message = row._mapping[Message]
        conversations.append(
            ConversationSummary(
                participant_id=row.participant_id,
                participant_name=row.participant_name,
                participant_avatar=row.participant_avatar,
                last_message_content=message.content,
                last_message_sent_at=message.sent_at,
                last_message_sender_id=message.sender_id,
                unread_count=row.unread_count,
            )
        )
    return conversations


@router.get("/conversation/user/{other_user_id}", response_model=list[ChatMessage])
async def get_conversation(
    other_user_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Full history with other_user_id, oldest first; marks their messages to me as read."""
    me = identity.id
    sender = aliased(User)
    receiver = aliased(User)

    result = await db.execute(
        select(
            Message,
            sender.name.label("sender_name"),
            sender.avatar_url.label("sender_avatar"),
            receiver.name.label("receiver_name"),
            receiver.avatar_url.label("receiver_avatar"),
        )
        .join(sender, Message.sender_id == sender.id)
        .join(receiver, Message.receiver_id == receiver.id)
        .where(
            or_(
                and_(Message.sender_id == me, Message.receiver_id == other_user_id),
                and_(Message.sender_id == other_user_id, Message.receiver_id == me),
            )
        )
        .order_by(Message.sent_at.asc(), Message.id.asc())
    )

    history = []
    for row in result.all():
        mapping = row._mapping
        message = mapping[Message]
        history.append(
            ChatMessage(
                **MessageResponse.model_validate(message).model_dump(),
                sender_name=mapping["sender_name"],
                sender_avatar=mapping["sender_avatar"],
                receiver_name=mapping["receiver_name"],
                receiver_avatar=mapping["receiver_avatar"],
            )
        )

    await db.execute(
        update(Message)
        .where(
            Message.sender_id == other_user_id,
            Message.receiver_id == me,
            Message.is_read.is_(False),
        )
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    return history
