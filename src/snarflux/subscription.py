"""Subscriptions — listener registries and the hierarchical notification tree.

ListenerCollection is the copy-on-write listener list shared by the store
and by every Subscription node. notify() iterates the list as it stood when
notification began; subscribe/unsubscribe calls made by a listener during
that loop only affect the next notification.

A Subscription belongs to one bound container. Once attached, it listens
either to its parent Subscription or, at the top of the tree, to the store.
Descendants register with it instead of the store, so a change flows down
the tree one level at a time and each container decides when its children
hear about it:

    store -> Subscription(A) -> Subscription(B) -> Subscription(C)

Detaching is terminal. A detached node drops its children and ignores any
notification still in flight.
"""

from __future__ import annotations

from typing import Callable

Listener = Callable[[], None]
Disposer = Callable[[], None]


def _noop() -> None:
    pass


class ListenerCollection:
    """Copy-on-write listener list with idempotent unsubscribe."""

    __slots__ = ("_current", "_next")

    def __init__(self) -> None:
        self._current: list[Listener] | None = []
        self._next: list[Listener] | None = self._current

    @property
    def cleared(self) -> bool:
        return self._next is None

    def _ensure_can_mutate_next(self) -> None:
        if self._next is self._current:
            self._next = list(self._current)

    def subscribe(self, listener: Listener) -> Disposer:
        """Register a listener for the next notification. Returns a disposer."""
        if self.cleared:
            return _noop

        subscribed = True
        self._ensure_can_mutate_next()
        self._next.append(listener)

        def _unsubscribe() -> None:
            nonlocal subscribed
            if not subscribed or self.cleared:
                return
            subscribed = False
            self._ensure_can_mutate_next()
            self._next.remove(listener)

        return _unsubscribe

    def notify(self) -> None:
        """Call every listener registered when notification starts, in order."""
        listeners = self._current = self._next
        if listeners is None:
            return
        for listener in listeners:
            listener()

    def get(self) -> list[Listener]:
        """Listeners the next notification will call."""
        return list(self._next) if self._next is not None else []

    def clear(self) -> None:
        self._current = None
        self._next = None

    def __len__(self) -> int:
        return len(self._next) if self._next is not None else 0


def _null_listeners() -> ListenerCollection:
    listeners = ListenerCollection()
    listeners.clear()
    return listeners


class Subscription:
    """One node of the notification tree, owned by a single container."""

    __slots__ = ("store", "parent_sub", "on_state_change", "_unsubscribe", "_listeners", "_terminated")

    def __init__(self, store, parent_sub: Subscription | None, on_state_change: Listener) -> None:
        self.store = store
        self.parent_sub = parent_sub
        self.on_state_change = on_state_change
        self._unsubscribe: Disposer | None = None
        self._listeners = _null_listeners()
        self._terminated = False

    def add_nested_sub(self, listener: Listener) -> Disposer:
        """Register a descendant. Attaches this node first if it is not yet."""
        self.try_subscribe()
        return self._listeners.subscribe(listener)

    def notify_nested_subs(self) -> None:
        self._listeners.notify()

    def listeners(self) -> list[Listener]:
        """Child listeners currently attached to this node."""
        return self._listeners.get()

    def is_subscribed(self) -> bool:
        return self._unsubscribe is not None

    @property
    def terminated(self) -> bool:
        return self._terminated

    def _handle_change(self) -> None:
        if self._unsubscribe is not None:
            self.on_state_change()

    def try_subscribe(self) -> None:
        """Attach to the parent node, or to the store at the root. Idempotent."""
        if self._unsubscribe is not None or self._terminated:
            return
        if self.parent_sub is not None:
            self._unsubscribe = self.parent_sub.add_nested_sub(self._handle_change)
        else:
            self._unsubscribe = self.store.subscribe(self._handle_change)
        self._listeners = ListenerCollection()

    def try_unsubscribe(self) -> None:
        """Detach and drop all children. Idempotent; the node stays inert."""
        self._terminated = True
        if self._unsubscribe is None:
            return
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        unsubscribe()
        self._listeners.clear()
        self._listeners = _null_listeners()

    def __repr__(self) -> str:
        if self._terminated:
            state = "terminated"
        elif self.is_subscribed():
            state = f"subscribed, {len(self._listeners)} children"
        else:
            state = "idle"
        return f"Subscription({state})"
