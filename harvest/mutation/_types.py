"""
Mutation types — write declarations.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from harvest._types import Json, Params
from harvest.auth import AuthSession

# ═══════════════════════════════════════════════════════════════════════════════
# Function Types
# ═══════════════════════════════════════════════════════════════════════════════

type InvalidatesFn[T] = Callable[[Params, T], Iterable[str]]
"""Tags to invalidate from the mutation input and its decoded result."""

type Decoder[T] = Callable[[Json], T]

type SuccessHook[T] = Callable[[T, AuthSession | None], None]
"""Runs after invalidation (e.g. storing credentials after login)."""


def _identity(raw: Json) -> Any:
    return raw


def _nothing(params: Params, data: object) -> Iterable[str]:
    return ()


# ═══════════════════════════════════════════════════════════════════════════════
# Mutation Definition
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class MutationDefinition[T]:
    """
    Declarative write.

    Fluent: each method returns a new definition, in any order.

    Example:
        UPDATE_PRODUCT = (
            M.define("updateProduct")
            .requires("product_id")
            .invalidates(lambda params, _: ["Products", tag("Products", params["product_id"])])
            .decoding(Product.model_validate)
        )

    Note: params named in requires() are checked before anything is sent.
    """

    kind: str
    invalidates_fn: InvalidatesFn[T] = _nothing
    decoder: Decoder[T] = _identity
    on_success_fn: SuccessHook[T] | None = None
    required: tuple[str, ...] = ()

    def invalidates(self, source: InvalidatesFn[T] | str | Iterable[str]) -> MutationDefinition[T]:
        """Set invalidated tags from a tag, a static collection or a function of (params, data)."""
        if isinstance(source, str):
            source = (source,)
        if callable(source):
            fn: InvalidatesFn[T] = source
        else:
            static = tuple(source)
            fn = lambda params, data: static  # noqa: E731
        return MutationDefinition(
            kind=self.kind,
            invalidates_fn=fn,
            decoder=self.decoder,
            on_success_fn=self.on_success_fn,
            required=self.required,
        )

    def decoding[U](self, decoder: Decoder[U]) -> MutationDefinition[U]:
        """Set payload decoder."""
        return MutationDefinition(
            kind=self.kind,
            invalidates_fn=self.invalidates_fn,  # type: ignore[arg-type]
            decoder=decoder,
            on_success_fn=self.on_success_fn,  # type: ignore[arg-type]
            required=self.required,
        )

    def on_success(self, hook: SuccessHook[T]) -> MutationDefinition[T]:
        """Set hook run after a successful write."""
        return MutationDefinition(
            kind=self.kind,
            invalidates_fn=self.invalidates_fn,
            decoder=self.decoder,
            on_success_fn=hook,
            required=self.required,
        )

    def requires(self, *names: str) -> MutationDefinition[T]:
        """Params that must be present (and non-empty) before the write is sent."""
        return MutationDefinition(
            kind=self.kind,
            invalidates_fn=self.invalidates_fn,
            decoder=self.decoder,
            on_success_fn=self.on_success_fn,
            required=tuple(dict.fromkeys((*self.required, *names))),
        )

    def missing_params(self, params: Params) -> tuple[str, ...]:
        values = params or {}
        return tuple(name for name in self.required if not values.get(name))

    def tags_for(self, params: Params, data: T) -> tuple[str, ...]:
        return tuple(dict.fromkeys(self.invalidates_fn(params, data)))

    def parse(self, raw: Json) -> T:
        return self.decoder(raw)


def define(kind: str) -> MutationDefinition[Json]:
    """
    Start a mutation definition.

    Example:
        PLACE_ORDER = M.define("placeOrder").invalidates("Orders")
    """
    return MutationDefinition(kind=kind)


__all__ = (
    "InvalidatesFn",
    "Decoder",
    "SuccessHook",
    "MutationDefinition",
    "define",
)
