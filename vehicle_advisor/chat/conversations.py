from __future__ import annotations

import itertools
import time

from .models import Conversation, Message

_conversations: dict[int, Conversation] = {}
_messages: list[Message] = []
_conversation_ids = itertools.count(1)
_message_ids = itertools.count(1)


def start_conversation(user_id: str) -> Conversation:
    conversation = Conversation(
        conversation_id=next(_conversation_ids),
        user_id=user_id,
        start_time=time.time(),
    )
    _conversations[conversation.conversation_id] = conversation
    return conversation


def get_conversation(conversation_id: int, user_id: str) -> Conversation | None:
    """Return the conversation if it exists and belongs to *user_id*."""
    conversation = _conversations.get(conversation_id)
    if conversation is None or conversation.user_id != user_id:
        return None
    return conversation


def list_conversations(user_id: str) -> list[Conversation]:
    """The user's conversations, newest first, with their latest message."""
    result: list[Conversation] = []
    for conversation in _conversations.values():
        if conversation.user_id != user_id:
            continue
        messages = get_messages(conversation.conversation_id)
        last = messages[-1] if messages else None
        result.append(conversation.model_copy(update={
            "last_message": last.content if last else None,
            "last_message_time": last.timestamp if last else None,
        }))
    return sorted(result, key=lambda c: (c.start_time, c.conversation_id), reverse=True)


def close_conversation(conversation_id: int) -> Conversation:
    conversation = _conversations[conversation_id].model_copy(
        update={"status": "closed", "end_time": time.time()},
    )
    _conversations[conversation_id] = conversation
    return conversation


def record_message(conversation_id: int, sender: str, content: str) -> Message:
    message = Message(
        message_id=next(_message_ids),
        conversation_id=conversation_id,
        sender=sender,
        content=content,
        timestamp=time.time(),
    )
    _messages.append(message)
    return message


def get_messages(conversation_id: int) -> list[Message]:
    return [m for m in _messages if m.conversation_id == conversation_id]


def clear_conversations() -> None:
    _conversations.clear()
    _messages.clear()
