"""Selector-based slice subscriptions.

A slice subscription wraps a caller's listener, selector and equality
function into a raw store listener.  The wrapper recomputes the slice on
every commit and forwards to the caller only when the slice changed
according to the equality function.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from minstore.store import Store

_logger = logging.getLogger(__name__)

SliceListener = Callable[[Any, Any], None]
Selector = Callable[[Any], Any]
EqualityFn = Callable[[Any, Any], bool]


def identity(state: Any) -> Any:
    return state


_VALUE_TYPES = (int, float, complex, str, bytes)


def same_value(a: Any, b: Any) -> bool:
    """Default slice equality.

    Numbers, strings and bytes of the same type compare by value (NaN equals
    NaN, ``True`` differs from ``1``); everything else compares by identity.
    Selectors returning containers should be memoized or paired with
    :func:`shallow_equal`.
    """
    if a is b:
        return True
    if type(a) is not type(b) or not isinstance(a, _VALUE_TYPES):
        return False
    if isinstance(a, float) and a != a:
        return b != b
    return bool(a == b)


def shallow_equal(a: Any, b: Any) -> bool:
    """Compare two slices one level deep.

    Mappings are equal when they have the same keys and each value is the
    same object; sequences (other than strings) when they have the same
    length and pairwise-identical items.  Anything else falls back to
    ``is`` followed by ``==``.  Useful for selectors that build a fresh
    dict or tuple on every call.
    """
    if a is b:
        return True
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(a[key] is b[key] for key in a)
    if (
        isinstance(a, Sequence)
        and isinstance(b, Sequence)
        and not isinstance(a, (str, bytes, bytearray))
        and not isinstance(b, (str, bytes, bytearray))
    ):
        return len(a) == len(b) and all(x is y for x, y in zip(a, b))
    return bool(a == b)


@dataclass(slots=True, eq=False)
class SelectorSubscription:
    """One active slice subscription.

    Holds the last slice forwarded to (or computed for) the listener.
    Instances are registered with the store as raw listeners; the store
    passes ``(state, previous_state)`` but the slice is always computed from
    the store's current committed state, so a nested ``set_state`` earlier in
    the same pass is already visible here.
    """

    listener: SliceListener
    selector: Selector
    equality_fn: EqualityFn
    get_state: Callable[[], Any]
    current_slice: Any = None

    def __call__(self, state: Any, previous_state: Any) -> None:
        next_slice = self.selector(self.get_state())
        if self.equality_fn(self.current_slice, next_slice):
            return
        previous_slice = self.current_slice
        self.current_slice = next_slice
        self.listener(next_slice, previous_slice)


def subscribe_with_selector(
    store: Store,
    listener: SliceListener,
    selector: Selector = identity,
    equality_fn: EqualityFn = same_value,
) -> Callable[[], None]:
    """Subscribe *listener* to ``selector(state)``.

    The slice is computed immediately (no notification).  Afterwards
    *listener* is called with ``(slice, previous_slice)`` only for commits
    where ``equality_fn(previous_slice, slice)`` is false.

    Returns a function removing this subscription; calling it again does
    nothing.
    """
    subscription = SelectorSubscription(
        listener=listener,
        selector=selector,
        equality_fn=equality_fn,
        get_state=store.get_state,
    )
    subscription.current_slice = selector(store.get_state())
    _logger.debug("%s: selector subscription on %r", store.name, getattr(selector, "__name__", selector))
    return store.subscribe(subscription)
