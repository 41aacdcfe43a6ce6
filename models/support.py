"""
Support chat data models.
"""

from enum import Enum
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class ChatStatus(str, Enum):
    ACTIVE = "active"
    RESOLVED = "resolved"


class MessageRole(str, Enum):
    USER = "user"
    SUPPORT = "support"


class ChatMessage(BaseModel):
    role: MessageRole
    content: str = Field(min_length=1)
    timestamp: datetime


class SupportChat(BaseModel):
    """A conversation between a family and the support team."""
    id: str
    user_id: str
    status: ChatStatus = Field(default=ChatStatus.ACTIVE)
    assigned_to: Optional[str] = Field(default=None, description="Support team member handling the chat")
    messages: List[ChatMessage] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None


class ChatResult(BaseModel):
    """Structured outcome of a support chat operation."""
    success: bool
    chat: Optional[SupportChat] = None
    chats: List[SupportChat] = Field(default_factory=list)
    error: Optional[str] = None
