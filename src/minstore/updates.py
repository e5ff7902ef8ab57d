"""State updates and the shallow merge.

An update is either a literal next state (partial or total) or a function
of the current state that returns one.  ``set_state`` accepts both bare
values and bare callables; :func:`as_update` tags them once and
:func:`resolve_update` resolves the tagged value.

Merge semantics are deliberately one level deep: keys in the patch
overwrite, every other key of the current state is preserved, nested
values are shared by reference.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from minstore.exceptions import StateMergeError

S = TypeVar("S")


@dataclass(frozen=True, slots=True)
class LiteralUpdate(Generic[S]):
    """The next state as given by the caller."""

    value: Any


@dataclass(frozen=True, slots=True)
class ComputedUpdate(Generic[S]):
    """The next state as computed from the current one."""

    fn: Callable[[S], Any]


Update = LiteralUpdate[S] | ComputedUpdate[S]


def as_update(update: Any) -> LiteralUpdate[Any] | ComputedUpdate[Any]:
    """Tag a bare ``set_state`` argument.

    Already-tagged updates pass through.  Callables become
    :class:`ComputedUpdate`; anything else is a :class:`LiteralUpdate`.
    """
    if isinstance(update, (LiteralUpdate, ComputedUpdate)):
        return update
    if callable(update):
        return ComputedUpdate(update)
    return LiteralUpdate(update)


def resolve_update(update: LiteralUpdate[S] | ComputedUpdate[S], state: S) -> Any:
    """Return the next (partial or total) state an update describes."""
    if isinstance(update, ComputedUpdate):
        return update.fn(state)
    return update.value


def _patch_fields(patch: Any) -> dict[str, Any] | None:
    if isinstance(patch, BaseModel):
        # Only fields the caller actually set count as a partial update;
        # values are taken as is so nested models stay shared.
        return {name: getattr(patch, name) for name in patch.model_fields_set}
    if isinstance(patch, Mapping):
        return dict(patch)
    return None


def merge_state(state: Any, patch: Any) -> Any:
    """Shallow-merge *patch* into *state* without mutating either.

    - mapping state: returns a new ``dict`` of ``state`` updated with the patch
    - pydantic model state: returns ``state.model_copy(update=...)``

    A ``None`` state (no state yet, or an initializer that returned
    ``None``) merges as an empty mapping.

    The patch may be a mapping or a pydantic model (its explicitly-set
    fields).  Raises :class:`StateMergeError` for any other combination.
    """
    if state is None:
        state = {}
    fields = _patch_fields(patch)
    if fields is not None:
        if isinstance(state, BaseModel):
            return state.model_copy(update=fields)
        if isinstance(state, Mapping):
            return {**state, **fields}
    raise StateMergeError(
        f"cannot merge {type(patch).__name__} into {type(state).__name__} state; "
        "pass replace=True to set a non-mapping state",
        state_type=type(state),
        update_type=type(patch),
    )
