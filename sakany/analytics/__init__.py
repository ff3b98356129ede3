"""
Usage analytics.

Responsibilities:
- Record search and lifestyle quiz events in memory.
- Aggregate listings, users, reports and events into the admin dashboard.
"""
