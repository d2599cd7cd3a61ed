"""
Auth — session credentials.

    from harvest import auth as A

    session = A.AuthSession()
"""

from __future__ import annotations

from harvest.auth._session import Role, AuthUser, AuthSession, SessionListener

__all__ = (
    "Role",
    "AuthUser",
    "AuthSession",
    "SessionListener",
)
