"""
Mutation — writes with declarative invalidation.

    from harvest import mutation as M

    CREATE = M.define("createProduct").invalidates("Products")
    result = await executor.mutate(CREATE, body=product)
"""

from __future__ import annotations

from harvest.mutation._types import (
    InvalidatesFn,
    Decoder,
    SuccessHook,
    MutationDefinition,
    define,
)
from harvest.mutation._executor import MutationExecutor

__all__ = (
    "InvalidatesFn",
    "Decoder",
    "SuccessHook",
    "MutationDefinition",
    "define",
    "MutationExecutor",
)
