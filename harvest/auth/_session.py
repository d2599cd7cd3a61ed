"""
Auth session — token and current user for the client session.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

import structlog

log = structlog.get_logger("harvest.auth")

Role = Literal["farmer", "landowner", "admin"]


@dataclass(frozen=True, slots=True)
class AuthUser:
    """Signed-in user."""

    id: str
    role: Role
    full_name: str


type SessionListener = Callable[["AuthSession"], None]


class AuthSession:
    """
    Mutable session credentials.

    The executors read `token` before each transport call; transports
    decide how to attach it (HttpTransport sends a bearer header).

    Example:
        session = AuthSession()
        session.set_credentials("jwt...", AuthUser("u1", "farmer", "Asha"))
        session.logout()
    """

    def __init__(self, token: str | None = None, user: AuthUser | None = None) -> None:
        self._token = token
        self._user = user
        self._listeners: list[SessionListener] = []

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def user(self) -> AuthUser | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    @property
    def user_id(self) -> str | None:
        return self._user.id if self._user is not None else None

    def set_credentials(self, token: str, user: AuthUser) -> None:
        self._token = token
        self._user = user
        log.debug("auth.signed_in", user_id=user.id, role=user.role)
        self._notify()

    def logout(self) -> None:
        self._token = None
        self._user = None
        log.debug("auth.signed_out")
        self._notify()

    def listen(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self) -> None:
        for listener in tuple(self._listeners):
            listener(self)


__all__ = ("Role", "AuthUser", "AuthSession", "SessionListener")
