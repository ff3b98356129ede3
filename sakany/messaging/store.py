from __future__ import annotations

import itertools
import time
from typing import Any

_conversations: dict[int, dict[str, Any]] = {}
_messages: list[dict[str, Any]] = []
_conversation_ids = itertools.count(1)
_message_ids = itertools.count(1)


def _pair(a: str, b: str) -> frozenset[str]:
    return frozenset((a, b))


def _find_conversation(user_a: str, user_b: str) -> dict[str, Any] | None:
    pair = _pair(user_a, user_b)
    for conv in _conversations.values():
        if _pair(conv["user1_id"], conv["user2_id"]) == pair:
            return conv
    return None


def _touch_conversation(sender_id: str, receiver_id: str, at: float) -> dict[str, Any]:
    conv = _find_conversation(sender_id, receiver_id)
    if conv is None:
        conv = {
            "id": next(_conversation_ids),
            "user1_id": sender_id,
            "user2_id": receiver_id,
            "last_message_at": at,
        }
        _conversations[conv["id"]] = conv
    else:
        conv["last_message_at"] = at
    return conv


def create_message(sender_id: str, receiver_id: str, content: str) -> dict[str, Any]:
    """Store a message and open or refresh the conversation it belongs to."""
    now = time.time()
    conv = _touch_conversation(sender_id, receiver_id, now)
    message = {
        "id": next(_message_ids),
        "conversation_id": conv["id"],
        "sender_id": sender_id,
        "receiver_id": receiver_id,
        "content": content,
        "is_read": False,
        "created_at": now,
    }
    _messages.append(message)
    return message


def get_conversation(conversation_id: int) -> dict[str, Any] | None:
    return _conversations.get(conversation_id)


def get_conversations(user_id: str) -> list[dict[str, Any]]:
    """Conversations of ``user_id``, most recent activity first."""
    result = []
    for conv in _conversations.values():
        if user_id not in (conv["user1_id"], conv["user2_id"]):
            continue
        other = conv["user2_id"] if conv["user1_id"] == user_id else conv["user1_id"]
        unread = sum(
            1
            for m in _messages
            if m["conversation_id"] == conv["id"] and m["receiver_id"] == user_id and not m["is_read"]
        )
        result.append({**conv, "other_user_id": other, "unread_count": unread})
    return sorted(result, key=lambda c: c["last_message_at"], reverse=True)


def get_messages(conversation_id: int) -> list[dict[str, Any]]:
    """Messages of a conversation, oldest first."""
    msgs = [m for m in _messages if m["conversation_id"] == conversation_id]
    return sorted(msgs, key=lambda m: (m["created_at"], m["id"]))


def mark_messages_as_read(sender_id: str, receiver_id: str) -> int:
    """Mark everything ``sender_id`` sent to ``receiver_id`` as read; returns how many changed."""
    changed = 0
    for m in _messages:
        if m["sender_id"] == sender_id and m["receiver_id"] == receiver_id and not m["is_read"]:
            m["is_read"] = True
            changed += 1
    return changed


def delete_user_messages(user_id: str) -> None:
    _messages[:] = [m for m in _messages if user_id not in (m["sender_id"], m["receiver_id"])]
    for conv_id in [
        cid for cid, c in _conversations.items() if user_id in (c["user1_id"], c["user2_id"])
    ]:
        del _conversations[conv_id]


def clear_messages() -> None:
    global _conversation_ids, _message_ids
    _conversations.clear()
    _messages.clear()
    _conversation_ids = itertools.count(1)
    _message_ids = itertools.count(1)
