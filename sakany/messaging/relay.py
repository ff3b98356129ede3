"""
WebSocket chat relay.

The relay keeps at most one live socket per user. A chat frame is stored
first and then handed to the receiver's socket when that user is online;
nothing is buffered for offline users beyond the message store itself.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..auth.users import get_user
from .store import create_message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Delivery:
    message: dict[str, Any]
    receiver_socket: Any | None


class ConnectionRegistry:
    def __init__(self) -> None:
        self._sockets: dict[str, Any] = {}

    def connect(self, user_id: str, socket: Any) -> None:
        # A newer connection replaces the previous one.
        self._sockets[user_id] = socket
        logger.info("WebSocket connected for user %s", user_id)

    def disconnect(self, user_id: str, socket: Any | None = None) -> None:
        if socket is not None and self._sockets.get(user_id) is not socket:
            return
        if self._sockets.pop(user_id, None) is not None:
            logger.info("WebSocket disconnected for user %s", user_id)

    def get(self, user_id: str) -> Any | None:
        return self._sockets.get(user_id)

    def online_users(self) -> list[str]:
        return list(self._sockets)


def route_message(
    registry: ConnectionRegistry,
    sender_id: str,
    payload: Any,
    user_lookup: Callable[[str], dict | None] = get_user,
) -> Delivery | None:
    """
    Store a ``{"type": "message", "receiver_id", "content"}`` frame.

    Returns the stored message and the receiver's socket (``None`` when the
    receiver is offline), or ``None`` when the frame is dropped.
    """
    if not isinstance(payload, dict) or payload.get("type") != "message":
        logger.warning("Dropping non-message frame from user %s", sender_id)
        return None

    receiver_id = payload.get("receiver_id")
    content = payload.get("content")
    if not isinstance(receiver_id, str) or not receiver_id:
        logger.warning("Dropping frame without receiver from user %s", sender_id)
        return None
    if receiver_id == sender_id:
        logger.warning("Dropping message from user %s to themselves", sender_id)
        return None
    if not isinstance(content, str) or not content.strip():
        logger.warning("Dropping empty message from user %s", sender_id)
        return None
    if user_lookup(receiver_id) is None:
        logger.warning("Dropping message from user %s to unknown user %s", sender_id, receiver_id)
        return None

    message = create_message(sender_id, receiver_id, content)
    socket = registry.get(receiver_id)
    if socket is None:
        logger.info("User %s offline; message %s stored only", receiver_id, message["id"])
    return Delivery(message=message, receiver_socket=socket)
