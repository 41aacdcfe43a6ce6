"""
Support chat between families and the support team.

Conversations live in process memory. Listeners register with
`subscribe(chat_id, on_update)` and get back an `unsubscribe()` callable;
every change to a chat is pushed to its listeners as a fresh copy, so a
listener never holds a live reference into the store.
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Union
from uuid import uuid4

from pydantic import ValidationError

from models import ChatMessage, ChatResult, ChatStatus, MessageRole, SupportChat

logger = logging.getLogger(__name__)

ChatListener = Callable[[SupportChat], None]
ACTIVE_FEED = "__active__"


class SupportChatService:

    def __init__(self):
        self.chats: Dict[str, SupportChat] = {}
        self.listeners: Dict[str, Dict[str, ChatListener]] = defaultdict(dict)

    # --- Commands ---

    def create_chat(self, user_id: str, initial_message: str) -> ChatResult:
        if not user_id:
            return ChatResult(success=False, error="User ID is required")
        now = datetime.now(timezone.utc)
        try:
            first = ChatMessage(role=MessageRole.USER, content=initial_message, timestamp=now)
        except ValidationError:
            return ChatResult(success=False, error="Message cannot be empty")

        chat = SupportChat(id=uuid4().hex, user_id=user_id, messages=[first], created_at=now, updated_at=now)
        self.chats[chat.id] = chat
        logger.info(f"Support chat created: {chat.id}")
        self._publish(chat)
        return ChatResult(success=True, chat=self._copy(chat))

    def send_message(self, chat_id: str, role: Union[MessageRole, str], content: str) -> ChatResult:
        chat = self.chats.get(chat_id)
        if chat is None:
            return ChatResult(success=False, error="Chat not found")
        if chat.status == ChatStatus.RESOLVED:
            return ChatResult(success=False, error="Chat has been resolved")

        now = datetime.now(timezone.utc)
        try:
            message = ChatMessage(role=role, content=content, timestamp=now)
        except ValidationError as e:
            logger.warning(f"Rejected support message for {chat_id}: {e}")
            return ChatResult(success=False, error="Invalid message")

        return self._update(chat_id, messages=[*chat.messages, message], updated_at=now)

    def assign(self, chat_id: str, support_member_id: str) -> ChatResult:
        if chat_id not in self.chats:
            return ChatResult(success=False, error="Chat not found")
        return self._update(chat_id, assigned_to=support_member_id, updated_at=datetime.now(timezone.utc))

    def resolve(self, chat_id: str) -> ChatResult:
        if chat_id not in self.chats:
            return ChatResult(success=False, error="Chat not found")
        now = datetime.now(timezone.utc)
        return self._update(chat_id, status=ChatStatus.RESOLVED, resolved_at=now, updated_at=now)

    # --- Queries ---

    def get_chat(self, chat_id: str) -> ChatResult:
        chat = self.chats.get(chat_id)
        if chat is None:
            return ChatResult(success=False, error="Chat not found")
        return ChatResult(success=True, chat=self._copy(chat))

    def user_chats(self, user_id: str, limit: int = 10) -> ChatResult:
        """Most recently updated first."""
        chats = sorted(
            (c for c in self.chats.values() if c.user_id == user_id),
            key=lambda c: c.updated_at,
            reverse=True
        )
        return ChatResult(success=True, chats=[self._copy(c) for c in chats[:limit]])

    def active_chats(self) -> ChatResult:
        """Open chats for the support dashboard, oldest first."""
        chats = sorted(
            (c for c in self.chats.values() if c.status == ChatStatus.ACTIVE),
            key=lambda c: c.created_at
        )
        return ChatResult(success=True, chats=[self._copy(c) for c in chats])

    # --- Subscriptions ---

    def subscribe(self, chat_id: str, on_update: ChatListener) -> Callable[[], None]:
        """
        Push the chat to `on_update` now (if it exists) and on every change.
        """
        token = uuid4().hex
        self.listeners[chat_id][token] = on_update

        chat = self.chats.get(chat_id)
        if chat is not None:
            self._notify(on_update, chat)

        def unsubscribe() -> None:
            self.listeners.get(chat_id, {}).pop(token, None)

        return unsubscribe

    def subscribe_to_active(self, on_update: ChatListener) -> Callable[[], None]:
        """Listen to every change of any chat (dashboard feed)."""
        return self.subscribe(ACTIVE_FEED, on_update)

    # --- Internals ---

    def _update(self, chat_id: str, **changes) -> ChatResult:
        chat = self.chats[chat_id].model_copy(update=changes)
        self.chats[chat_id] = chat
        self._publish(chat)
        return ChatResult(success=True, chat=self._copy(chat))

    def _publish(self, chat: SupportChat) -> None:
        for key in (chat.id, ACTIVE_FEED):
            for listener in list(self.listeners.get(key, {}).values()):
                self._notify(listener, chat)

    def _notify(self, listener: ChatListener, chat: SupportChat) -> None:
        try:
            listener(self._copy(chat))
        except Exception as e:
            logger.error(f"Support chat listener failed for {chat.id}: {e}")

    @staticmethod
    def _copy(chat: SupportChat) -> SupportChat:
        return chat.model_copy(deep=True)
