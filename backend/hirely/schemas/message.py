from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class MessageCreate(BaseModel):
    receiver_id: int
    content: str = Field(..., min_length=1)
    job_id: Optional[int] = None


class MessageResponse(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    job_id: Optional[int] = None
    content: str
    sent_at: Optional[datetime] = None
    is_read: bool

    class Config:
        from_attributes = True


class MessageSentResponse(BaseModel):
    message: str
    data: MessageResponse


class ConversationSummary(BaseModel):
    participant_id: int
    participant_name: str
    participant_avatar: Optional[str] = None
    last_message_content: str
    last_message_sent_at: Optional[datetime] = None
    last_message_sender_id: int
    unread_count: int


class ChatMessage(MessageResponse):
    sender_name: str
    sender_avatar: Optional[str] = None
    receiver_name: str
    receiver_avatar: Optional[str] = None
