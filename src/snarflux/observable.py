"""Observable export — the store seen as a minimal reactive stream.

Lets generic observer-pattern consumers follow the state without knowing
about listeners: any object with a ``next`` method receives the current
state on subscribe and again after every dispatch.

Usage:
    class Printer:
        def next(self, state):
            print(state)

    sub = store.observable().subscribe(Printer())
    store.dispatch({"type": "INC"})
    sub.unsubscribe()
"""

from __future__ import annotations


class StoreSubscription:
    """Handle returned by StoreObservable.subscribe()."""

    __slots__ = ("_disposer",)

    def __init__(self, disposer) -> None:
        self._disposer = disposer

    @property
    def closed(self) -> bool:
        return self._disposer is None

    def unsubscribe(self) -> None:
        """Stop emitting. Safe to call more than once."""
        if self._disposer is not None:
            disposer, self._disposer = self._disposer, None
            disposer()


class StoreObservable:
    """Emits store state to observers."""

    __slots__ = ("_store",)

    def __init__(self, store) -> None:
        self._store = store

    def subscribe(self, observer) -> StoreSubscription:
        if observer is None:
            raise TypeError("Expected the observer to be an object.")

        def _observe_state() -> None:
            emit = getattr(observer, "next", None)
            if emit is not None:
                emit(self._store.get_state())

        _observe_state()
        return StoreSubscription(self._store.subscribe(_observe_state))

    def observable(self) -> StoreObservable:
        return self

    def __repr__(self) -> str:
        return f"StoreObservable({self._store!r})"
