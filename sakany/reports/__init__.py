"""
Property reports and owner feedback.

Responsibilities:
- Accept user reports about a listing and let admins review them.
- Send admin notes back to the listing owner as feedback notices.
- Track which notices the owner has read.
"""
