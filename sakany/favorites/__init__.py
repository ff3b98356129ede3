"""
Saved properties.

Responsibilities:
- Keep one favorite per (user, property) pair.
- List a user's favorites newest first.
- Drop favorites when their property or their user goes away.
"""
