"""
harvest — client-side data cache for the agricultural marketplace API.

    import harvest
    from harvest import api, cart as K

    harvest.configure_logging("DEBUG")
    ctx = harvest.context(transport).build()
    lands = await ctx.queries.query(api.GET_LANDS)
    await ctx.mutations.mutate(api.CREATE_LAND, body=new_land)
"""

from harvest import transport
from harvest import store
from harvest import tags
from harvest import auth
from harvest import query
from harvest import mutation
from harvest import api
from harvest import cart
from harvest._types import (
    Result,
    Ok,
    Error,
    LazyCoroResult,
    Json,
    Params,
    cache_key,
)
from harvest._policy import CachePolicy
from harvest._context import ContextBuilder, CacheContext, context
from harvest.logging import configure_logging

__version__ = "0.1.0"

__all__ = (
    "transport",
    "store",
    "tags",
    "auth",
    "query",
    "mutation",
    "api",
    "cart",
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    "Json",
    "Params",
    "cache_key",
    "CachePolicy",
    "ContextBuilder",
    "CacheContext",
    "context",
    "configure_logging",
)
