"""Container bindings — glue between a store and one node of a host view tree.

A Connector describes how to derive props (built by connect() or
connect_advanced()). Binding it to a node yields a ContainerBinding, which
the host tree drives through lifecycle hooks:

    binding = connector.bind(own_props, context=parent_context, host=host)
    binding.did_mount()                  # node is live: start listening
    binding.will_receive_props(props)    # parent passed new own props
    if binding.should_update():          # derived props changed?
        binding.will_update()
        props = binding.render()         # raises a captured selector error
        ...                              # host recomputes its output
        binding.did_update()             # children hear about the change now
    binding.will_unmount()               # stop for good

The host supplies one capability, Host.request_update(), used when a state
change alone (no new own props) requires the node to recompute.

Store and parent subscription are handed down explicitly: each binding
offers child_context() for the bindings beneath it, and provide(store)
gives the context for the top of the tree.

Ordering: a binding whose props changed notifies its child subscriptions
only from did_update(), i.e. after the host has recomputed it. Children
therefore always compute against props their parent has already applied,
and never hear the same change twice.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, NamedTuple, Protocol

from snarflux import _anchor
from snarflux._utils import is_plain_record
from snarflux.subscription import Subscription


class Host(Protocol):
    """What a binding needs from the host view tree."""

    def request_update(self) -> None:
        """Recompute this node's output without new own props."""


@dataclass(frozen=True)
class BindingContext:
    """Store and nearest subscribed ancestor, passed down the tree."""

    store: Any
    subscription: Subscription | None = None


def provide(store) -> BindingContext:
    """Context for the top of a tree: bindings attach to the store directly."""
    if store is None:
        raise TypeError("provide() requires a store.")
    return BindingContext(store)


def _noop() -> None:
    pass


class SelectorMemo(NamedTuple):
    """Last selector outcome for one binding. Replaced, never mutated."""

    props: Any = None
    error: Exception | None = None
    should_update: bool = False


class StatefulSelector:
    """Runs a final-props selector against the store and remembers the outcome."""

    __slots__ = ("_source", "_store", "memo", "_active")

    def __init__(self, source: Callable, store) -> None:
        self._source = source
        self._store = store
        self.memo = SelectorMemo()
        self._active = True

    @property
    def props(self) -> Any:
        return self.memo.props

    @property
    def error(self) -> Exception | None:
        return self.memo.error

    @property
    def should_update(self) -> bool:
        return self.memo.should_update

    def run(self, own_props) -> None:
        if not self._active:
            return
        memo = self.memo
        try:
            next_props = self._source(self._store.get_state(), own_props)
        except Exception as error:
            self.memo = SelectorMemo(memo.props, error, True)
            return
        if next_props is not memo.props or memo.error is not None:
            self.memo = SelectorMemo(next_props, None, True)

    def mark_rendered(self) -> None:
        self.memo = self.memo._replace(should_update=False)

    def deactivate(self) -> None:
        self._active = False
        self.memo = self.memo._replace(should_update=False)


class Connector:
    """Reusable description of a container; bind() it once per tree node.

    version increases whenever reconcile() swaps in new selector logic;
    live bindings compare it at each recompute and rebuild their selector.
    """

    __slots__ = (
        "selector_factory", "factory_options", "display_name", "method_name",
        "render_count_prop", "should_handle_state_changes", "defer_errors", "version",
    )

    def __init__(
        self,
        selector_factory: Callable,
        factory_options: Any,
        *,
        display_name: str,
        method_name: str,
        render_count_prop: str | None,
        should_handle_state_changes: bool,
        defer_errors: bool,
    ) -> None:
        self.selector_factory = selector_factory
        self.factory_options = factory_options
        self.display_name = display_name
        self.method_name = method_name
        self.render_count_prop = render_count_prop
        self.should_handle_state_changes = should_handle_state_changes
        self.defer_errors = defer_errors
        self.version = _anchor.new_version()

    def bind(self, own_props: dict | None = None, *, context: BindingContext, host: Host) -> ContainerBinding:
        return ContainerBinding(self, own_props, context, host)

    def reconcile(self, replacement: Connector) -> None:
        """Adopt replacement's selector logic in place. Bindings pick it up lazily."""
        self.selector_factory = replacement.selector_factory
        self.factory_options = replacement.factory_options
        self.display_name = replacement.display_name
        self.method_name = replacement.method_name
        self.render_count_prop = replacement.render_count_prop
        self.should_handle_state_changes = replacement.should_handle_state_changes
        self.defer_errors = replacement.defer_errors
        self.version = _anchor.new_version()

    def __repr__(self) -> str:
        return f"Connector({self.display_name}, v{self.version})"


class ContainerBinding:
    """Per-node state: selector memo, subscription node, lifecycle handling."""

    def __init__(self, connector: Connector, own_props: dict | None, context: BindingContext, host: Host) -> None:
        store = context.store if context is not None else None
        if store is None:
            raise TypeError(
                f'Could not find a store for "{connector.display_name}". Bind the top '
                "of the tree with provide(store), or pass a child_context() down."
            )

        self.connector = connector
        self.version = connector.version
        self.store = store
        self.host = host
        self.own_props = own_props if own_props is not None else {}
        self.render_count = 0
        self.subscription: Subscription | None = None
        self._context = context
        self._notify_nested_subs: Callable[[], None] = _noop
        self._notify_on_update = False
        self._mounted = False
        self._unmounted = False

        self._init_selector()
        self._init_subscription()

    # ─── Setup ───────────────────────────────────────────────────────────

    def _init_selector(self) -> None:
        connector = self.connector
        source = connector.selector_factory(self.store.dispatch, connector.factory_options)
        self.selector = StatefulSelector(source, self.store)
        self.selector.run(self.own_props)

    def _init_subscription(self) -> None:
        if not self.connector.should_handle_state_changes:
            return
        # Attached in did_mount(), never here: a node that is built but never
        # mounted must not leave a listener behind.
        self.subscription = Subscription(self.store, self._context.subscription, self.on_state_change)
        self._notify_nested_subs = self.subscription.notify_nested_subs

    def child_context(self) -> BindingContext:
        """Context to hand to bindings nested under this node."""
        return BindingContext(self.store, self.subscription or self._context.subscription)

    def is_subscribed(self) -> bool:
        return self.subscription is not None and self.subscription.is_subscribed()

    # ─── Hot swap ────────────────────────────────────────────────────────

    def rebuild_selector(self) -> None:
        """Rebuild the selector from the connector, keeping attached children."""
        self.version = self.connector.version
        self._init_selector()
        if self.subscription is None and self.connector.should_handle_state_changes:
            self._init_subscription()
            if self._mounted:
                self.subscription.try_subscribe()

    def _check_version(self) -> None:
        if self.version != self.connector.version and not self._unmounted:
            self.rebuild_selector()

    # ─── Lifecycle hooks ─────────────────────────────────────────────────

    def did_mount(self) -> None:
        self._mounted = True
        if not self.connector.should_handle_state_changes or self._unmounted:
            return
        self.subscription.try_subscribe()
        # The store may have changed between construction and mount.
        self.selector.run(self.own_props)
        if self.selector.should_update:
            self.host.request_update()

    def will_receive_props(self, next_props: dict) -> None:
        self._check_version()
        self.own_props = next_props
        self.selector.run(next_props)

    def should_update(self) -> bool:
        return self.selector.should_update

    def will_update(self) -> None:
        self._check_version()

    def render(self) -> Any:
        """Props for the host to recompute with. Raises a captured selector error."""
        memo = self.selector.memo
        self.selector.mark_rendered()
        if memo.error is not None:
            raise memo.error
        return self._add_extra_props(memo.props)

    def did_update(self) -> None:
        if self._notify_on_update:
            self._notify_on_update = False
            self._notify_nested_subs()

    def will_unmount(self) -> None:
        """Stop listening for good. Safe to call more than once."""
        if self.subscription is not None:
            self.subscription.try_unsubscribe()
        self.subscription = None
        self._notify_nested_subs = _noop
        self._notify_on_update = False
        self.selector.deactivate()
        self._unmounted = True

    # ─── Store notifications ─────────────────────────────────────────────

    def on_state_change(self) -> None:
        if self._unmounted:
            return
        self._check_version()
        self.selector.run(self.own_props)

        if not self.selector.should_update:
            self._notify_nested_subs()
            return

        self._notify_on_update = True
        self.host.request_update()
        error = self.selector.error
        if error is not None and not self.connector.defer_errors:
            raise error

    def _add_extra_props(self, props):
        # Non-plain props were already warned about; pass them through untouched.
        if not self.connector.render_count_prop or not is_plain_record(props):
            return props
        with_extras = dict(props)
        with_extras[self.connector.render_count_prop] = self.render_count
        self.render_count += 1
        return with_extras

    def __repr__(self) -> str:
        if self._unmounted:
            state = "unmounted"
        elif self.is_subscribed():
            state = "subscribed"
        else:
            state = "idle"
        return f"ContainerBinding({self.connector.display_name}, {state})"


def connect_advanced(
    selector_factory: Callable,
    factory_options: Any = None,
    *,
    name: str = "Component",
    get_display_name: Callable[[str], str] = lambda name: f"ConnectAdvanced({name})",
    method_name: str = "connect_advanced",
    render_count_prop: str | None = None,
    should_handle_state_changes: bool = True,
    defer_errors: bool = True,
) -> Connector:
    """Build a Connector from a selector factory.

    selector_factory(dispatch, factory_options) is called once per binding
    (and again after a hot swap) and must return a (state, own_props) ->
    props selector. It owns all memoization: return the same props object
    when nothing changed, or the node recomputes on every notification.

    defer_errors controls selector failures: by default the error is held
    until render(); with defer_errors=False it is also raised at once from
    the state-change notification.

    Usage:
        def factory(dispatch, options):
            return lambda state, own_props: {"count": state, "dispatch": dispatch}

        Counter = connect_advanced(factory, name="Counter")
        binding = Counter.bind({}, context=provide(store), host=host)
    """
    return Connector(
        selector_factory,
        factory_options,
        display_name=get_display_name(name),
        method_name=method_name,
        render_count_prop=render_count_prop,
        should_handle_state_changes=should_handle_state_changes,
        defer_errors=defer_errors,
    )
