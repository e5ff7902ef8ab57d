"""In-memory observable state store.

A :class:`Store` owns exactly one state value and a registry of listeners.
All changes go through :meth:`Store.set_state`, which commits a shallow
merge (or a full replace) and then synchronously notifies every listener
registered when the notification pass started.

Everything runs on the caller's thread of control: ``set_state`` returns
only after every listener has returned.  A listener that raises aborts the
remaining notifications for that update; the committed state stays
committed and the exception propagates to the ``set_state`` caller.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from minstore._redact import changed_keys, redact_for_log
from minstore.config import StoreConfig
from minstore.exceptions import StoreRecursionError
from minstore.selectors import EqualityFn, Selector, SliceListener, identity, same_value, subscribe_with_selector
from minstore.updates import Update, as_update, merge_state, resolve_update

_logger = logging.getLogger(__name__)

S = TypeVar("S")

Listener = Callable[[S, S], None]
Unsubscribe = Callable[[], None]
SetState = Callable[..., None]
GetState = Callable[[], S]


class Store(Generic[S]):
    """Single-value state container with synchronous listeners.

    Usually built through :func:`create`, which runs the state initializer
    against the store's own ``set_state``/``get_state``.
    """

    def __init__(self, *, config: StoreConfig | None = None) -> None:
        self._config = config or StoreConfig()
        self._state: Any = None
        # Insertion-ordered; one token per subscribe call, so the same
        # callable subscribed twice is two independent registrations.
        self._listeners: dict[int, Listener[S]] = {}
        self._tokens = itertools.count()
        self._depth = 0

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def listener_count(self) -> int:
        """Number of live registrations (slice subscriptions included)."""
        return len(self._listeners)

    def __repr__(self) -> str:
        return f"<Store {self.name!r} listeners={len(self._listeners)}>"

    def get_state(self) -> S:
        """Return the committed state (``None`` while the initializer runs)."""
        return self._state

    def set_state(
        self,
        update: S | Any | Callable[[S], Any] | Update[S],
        replace: bool = False,
    ) -> None:
        """Commit an update and notify listeners.

        *update* is the next state (partial unless *replace*), a function of
        the current state returning one, or an already-tagged
        :class:`~minstore.updates.LiteralUpdate` /
        :class:`~minstore.updates.ComputedUpdate`.

        If the resolved value is the current state object itself, nothing
        happens.  Equal-but-new objects are a real change.
        """
        current = self._state
        next_state = resolve_update(as_update(update), current)
        if next_state is current:
            return

        max_depth = self._config.max_notify_depth
        if max_depth is not None and self._depth >= max_depth:
            raise StoreRecursionError(
                f"{self.name}: set_state nested {self._depth} notification passes deep (max {max_depth})",
                depth=self._depth,
            )

        if replace:
            state = next_state
        else:
            state = merge_state(current, next_state)

        previous = current
        self._state = state
        self._log_commit(state, previous, replace=replace)
        self._notify(state, previous)

    def subscribe(
        self,
        listener: Listener[S] | SliceListener,
        *,
        selector: Selector | None = None,
        equality_fn: EqualityFn | None = None,
    ) -> Unsubscribe:
        """Register a listener and return a function that removes it.

        With neither *selector* nor *equality_fn*, *listener* receives
        ``(state, previous_state)`` on every commit.  With either one, this
        is :meth:`subscribe_selector` and the missing argument takes its
        default.
        """
        if selector is not None or equality_fn is not None:
            return self.subscribe_selector(
                listener,
                selector if selector is not None else identity,
                equality_fn if equality_fn is not None else same_value,
            )

        token = next(self._tokens)
        self._listeners[token] = listener
        _logger.debug("%s: subscribed listener #%d (%d active)", self.name, token, len(self._listeners))

        def unsubscribe() -> None:
            if self._listeners.pop(token, None) is not None:
                _logger.debug("%s: unsubscribed listener #%d", self.name, token)

        return unsubscribe

    def subscribe_selector(
        self,
        listener: SliceListener,
        selector: Selector = identity,
        equality_fn: EqualityFn = same_value,
    ) -> Unsubscribe:
        """Register *listener* for changes of ``selector(state)`` only."""
        return subscribe_with_selector(self, listener, selector, equality_fn)

    def destroy(self) -> None:
        """Remove every listener.  The state is left as is."""
        if self._listeners:
            _logger.debug("%s: destroyed, dropping %d listeners", self.name, len(self._listeners))
        self._listeners.clear()

    def _commit_initial(self, state: S) -> None:
        self._state = state
        _logger.debug("%s: initialized with %s", self.name, type(state).__name__)

    def _notify(self, state: S, previous: S) -> None:
        # Snapshot taken up front: registrations made during the pass wait
        # for the next commit, removals made during the pass are honoured.
        tokens = list(self._listeners)
        self._depth += 1
        try:
            for token in tokens:
                listener = self._listeners.get(token)
                if listener is None:
                    continue
                listener(state, previous)
        finally:
            self._depth -= 1

    def _log_commit(self, state: Any, previous: Any, *, replace: bool) -> None:
        if not _logger.isEnabledFor(logging.DEBUG):
            return
        _logger.debug(
            "%s: %s committed, changed=%s, notifying %d listeners (depth %d)",
            self.name,
            "replace" if replace else "merge",
            changed_keys(state, previous),
            len(self._listeners),
            self._depth,
        )
        if self._config.log_state:
            _logger.debug(
                "%s: state=%s",
                self.name,
                redact_for_log(
                    state,
                    sensitive_keys=self._config.sensitive_keys,
                    max_string=self._config.max_log_string,
                ),
            )


StateCreator = Callable[[SetState, GetState[S], Store[S]], S]


def create(initializer: StateCreator[S], config: StoreConfig | None = None) -> Store[S]:
    """Create a store whose initial state is ``initializer(set_state, get_state, store)``.

    The store exists before the initializer runs, so the initializer may
    close over ``set_state``/``get_state`` to build action functions kept in
    the state itself::

        store = create(lambda set, get, api: {
            "count": 0,
            "inc": lambda: set(lambda s: {"count": s["count"] + 1}),
        })

    The returned value becomes the initial state without notifying anyone.
    """
    store: Store[S] = Store(config=config)
    store._commit_initial(initializer(store.set_state, store.get_state, store))
    return store
