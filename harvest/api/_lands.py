"""
Land listings — queries and mutations.
"""

from __future__ import annotations

from collections.abc import Iterable

from harvest import mutation as M
from harvest import query as Q
from harvest._types import Params
from harvest.api._models import Land, parse_lands
from harvest.api._params import missing, require
from harvest.tags import tag
from harvest.transport import Route


# ═══════════════════════════════════════════════════════════════════════════════
# Queries
# ═══════════════════════════════════════════════════════════════════════════════


def _lands_tags(params: Params, lands: list[Land] | None) -> Iterable[str]:
    yield "Lands"
    for land in lands or ():
        yield tag("Lands", land.id)


GET_LANDS = Q.define("Lands").decoding(parse_lands).provides(_lands_tags)

GET_USER_LANDS = (
    Q.define("UserLands")
    .decoding(parse_lands)
    .provides(lambda params, _: [tag("UserLands", require(params, "user_id"))])
    .skip_when(missing("user_id"))
)


# ═══════════════════════════════════════════════════════════════════════════════
# Mutations
# ═══════════════════════════════════════════════════════════════════════════════

CREATE_LAND = (
    M.define("createLand")
    .decoding(Land.model_validate)
    .invalidates(lambda params, land: ["Lands", tag("UserLands", land.owner_id)])
)

UPDATE_LAND = (
    M.define("updateLand")
    .requires("land_id")
    .decoding(Land.model_validate)
    .invalidates(
        lambda params, land: [
            tag("Lands", require(params, "land_id")),
            tag("UserLands", land.owner_id),
        ]
    )
)

# The server answers 204, so the owner comes from the caller.
DELETE_LAND = (
    M.define("deleteLand")
    .requires("land_id", "owner_id")
    .invalidates(lambda params, _: ["Lands", tag("UserLands", require(params, "owner_id"))])
)


ROUTES = {
    GET_LANDS.kind: Route("GET", "lands"),
    GET_USER_LANDS.kind: Route("GET", "lands/user/{user_id}"),
    CREATE_LAND.kind: Route("POST", "lands"),
    UPDATE_LAND.kind: Route("PUT", "lands/{land_id}"),
    DELETE_LAND.kind: Route("DELETE", "lands/{land_id}"),
}


__all__ = (
    "GET_LANDS",
    "GET_USER_LANDS",
    "CREATE_LAND",
    "UPDATE_LAND",
    "DELETE_LAND",
    "ROUTES",
)
