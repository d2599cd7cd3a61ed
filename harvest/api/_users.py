"""
Profiles and authentication.
"""

from __future__ import annotations

from harvest import mutation as M
from harvest import query as Q
from harvest.api._models import AuthResponse, UserProfile
from harvest.api._params import missing, require
from harvest.auth import AuthSession
from harvest.tags import tag
from harvest.transport import Route

# ═══════════════════════════════════════════════════════════════════════════════
# Profile
# ═══════════════════════════════════════════════════════════════════════════════

GET_PROFILE = (
    Q.define("Profile")
    .decoding(UserProfile.model_validate)
    .provides(lambda params, _: [tag("Profile", require(params, "user_id"))])
    .skip_when(missing("user_id"))
)

UPDATE_PROFILE = (
    M.define("updateProfile")
    .requires("user_id")
    .decoding(UserProfile.model_validate)
    .invalidates(lambda params, _: [tag("Profile", require(params, "user_id"))])
)


# ═══════════════════════════════════════════════════════════════════════════════
# Auth
# ═══════════════════════════════════════════════════════════════════════════════


def _store_credentials(response: AuthResponse, session: AuthSession | None) -> None:
    if session is not None:
        session.set_credentials(response.token, response.to_user())


LOGIN = (
    M.define("login")
    .decoding(AuthResponse.model_validate)
    .on_success(_store_credentials)
)

# Signup answers with a token too, so it signs the user in.
SIGNUP = (
    M.define("signup")
    .decoding(AuthResponse.model_validate)
    .on_success(_store_credentials)
)


ROUTES = {
    GET_PROFILE.kind: Route("GET", "profile/{user_id}"),
    UPDATE_PROFILE.kind: Route("PUT", "profile/{user_id}"),
    LOGIN.kind: Route("POST", "auth/login"),
    SIGNUP.kind: Route("POST", "auth/signup"),
}


__all__ = (
    "GET_PROFILE",
    "UPDATE_PROFILE",
    "LOGIN",
    "SIGNUP",
    "ROUTES",
)
