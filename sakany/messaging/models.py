from __future__ import annotations

from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    receiver_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=5000)


class MarkReadRequest(BaseModel):
    sender_id: str = Field(..., min_length=1, description="Whose messages to the caller are now read")


class MessageOut(BaseModel):
    id: int
    conversation_id: int
    sender_id: str
    receiver_id: str
    content: str
    is_read: bool
    created_at: float


class ConversationOut(BaseModel):
    id: int
    user1_id: str
    user2_id: str
    last_message_at: float
    other_user_id: str
    other_user_name: str | None = None
    unread_count: int = 0
