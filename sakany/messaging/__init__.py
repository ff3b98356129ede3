"""
User-to-user messaging.

Responsibilities:
- Store messages and keep one conversation per pair of users.
- Track unread messages and mark them read.
- Relay chat frames between live WebSocket connections.
"""
