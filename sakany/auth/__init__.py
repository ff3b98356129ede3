"""
Accounts and sessions.

Responsibilities:
- Register users with bcrypt-hashed passwords and grant the admin flag by e-mail domain.
- Authenticate logins and expose the public part of a user for the session cookie.
- Provide FastAPI dependencies that enforce login and admin access.
"""
