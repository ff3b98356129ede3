"""
Property listings.

Responsibilities:
- Validate landlord submissions into canonical property records.
- Decide which records are publicly visible and how their status is shown.
- Keep the in-memory property catalogue and serve search over it.
- Load seed catalogues for demos and local development.
"""
