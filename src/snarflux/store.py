"""Store — a single state tree changed only by dispatching actions.

The store holds the current state and reducer. dispatch(action) runs
reducer(state, action), keeps the result as the new state and then calls
every listener that was registered when the notification phase began.

Rules enforced here:
- actions are plain records with a ``type`` that is present and not None
- reducers may not dispatch (listeners may)
- a listener that subscribes or unsubscribes during a notification only
  changes who hears the next one

Thread safety: call set_scheduler() once from the thread that owns the
store. After that, dispatch() from any other thread is handed to the
scheduler instead of running inline. Dispatch on the owning thread stays
synchronous.
"""

from __future__ import annotations

import threading
from typing import Any, Callable

from snarflux._utils import is_plain_record
from snarflux.action import ActionTypes
from snarflux.errors import IllegalStateError
from snarflux.observable import StoreObservable
from snarflux.subscription import Disposer, ListenerCollection, Listener

Reducer = Callable[[Any, dict], Any]
StoreFactory = Callable[..., "Store"]
Enhancer = Callable[[StoreFactory], StoreFactory]

# ─── Auto-marshal ────────────────────────────────────────────────────────────
_scheduler = None
_scheduler_thread = None


def set_scheduler(scheduler) -> None:
    """Set the global thread scheduler for cross-thread dispatch.

    Call once from the main/UI thread:
        snarflux.set_scheduler(app.call_from_thread)

    After this, any dispatch() from a background thread is automatically
    marshaled. Main-thread dispatches remain synchronous.
    """
    global _scheduler, _scheduler_thread
    _scheduler = scheduler
    _scheduler_thread = threading.current_thread()


def _check_action(action) -> None:
    if not is_plain_record(action):
        raise TypeError(
            "Actions must be plain records. Use custom middleware for other "
            f"kinds of actions. Received {type(action).__name__}."
        )
    if action.get("type") is None:
        raise TypeError(
            'Actions may not have an undefined "type" key. '
            "Have you misspelled a constant?"
        )


class Store:
    """Owns the state, the active reducer and the listener registry."""

    def __init__(self, reducer: Reducer, preloaded_state: Any = None) -> None:
        if not callable(reducer):
            raise TypeError("Expected the reducer to be a callable.")

        self._reducer = reducer
        self._state = preloaded_state
        self._listeners = ListenerCollection()
        self._is_dispatching = False

        # Every reducer fills in its initial state.
        self._dispatch({"type": ActionTypes.INIT})

    def get_state(self) -> Any:
        return self._state

    def subscribe(self, listener: Listener) -> Disposer:
        """Call listener after every dispatch. Returns an idempotent unsubscribe.

        Listeners may read get_state() and may dispatch. Each dispatch calls
        the listeners registered when its notification phase starts, so a
        nested dispatch can change the state several times before an outer
        listener runs; that listener still reads the latest state.
        """
        if not callable(listener):
            raise TypeError("Expected listener to be a callable.")
        return self._listeners.subscribe(listener)

    def dispatch(self, action: dict) -> dict:
        """Dispatch an action. The only way to change the state.

        Returns the action, so middleware further up the chain can inspect
        it. Auto-marshals from background threads once a scheduler is set;
        a malformed action is still rejected on the calling thread.
        """
        if _scheduler is not None and threading.current_thread() != _scheduler_thread:
            _check_action(action)
            _scheduler(lambda a=action: self._dispatch(a))
            return action
        return self._dispatch(action)

    def _dispatch(self, action: dict) -> dict:
        _check_action(action)
        self._reduce(action)
        self._listeners.notify()
        return action

    def _reduce(self, action: dict) -> None:
        """Run the reducer under the in-dispatch guard. Listeners are not called."""
        if self._is_dispatching:
            raise IllegalStateError("Reducers may not dispatch actions.")

        try:
            self._is_dispatching = True
            self._state = self._reducer(self._state, action)
        finally:
            self._is_dispatching = False

    def replace_reducer(self, next_reducer: Reducer) -> None:
        """Swap the active reducer, e.g. after code splitting or a reload."""
        if not callable(next_reducer):
            raise TypeError("Expected the next_reducer to be a callable.")
        self._reducer = next_reducer
        self._dispatch({"type": ActionTypes.INIT})

    def observable(self) -> StoreObservable:
        """Observer-pattern view of the state, for generic stream consumers."""
        return StoreObservable(self)

    @property
    def is_dispatching(self) -> bool:
        return self._is_dispatching

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._state!r})"


def create_store(
    reducer: Reducer,
    preloaded_state: Any = None,
    enhancer: Enhancer | None = None,
) -> Store:
    """Create a store holding the state tree.

    preloaded_state seeds the state, e.g. from a saved session. enhancer
    wraps store creation (apply_middleware is the one snarflux ships); when
    the second argument is callable and no enhancer is given, it is taken
    as the enhancer.

    Usage:
        def count(state=None, action=None):
            state = 0 if state is None else state
            return state + 1 if action["type"] == "INC" else state

        store = create_store(count)
        store.dispatch({"type": "INC"})
        store.get_state()  # 1
    """
    if callable(preloaded_state) and enhancer is None:
        enhancer, preloaded_state = preloaded_state, None

    if enhancer is not None:
        if not callable(enhancer):
            raise TypeError("Expected the enhancer to be a callable.")
        return enhancer(create_store)(reducer, preloaded_state)

    return Store(reducer, preloaded_state)
