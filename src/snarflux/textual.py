"""Textual integration for snarflux. Opt-in — requires textual.

TextualHost is a Host for one widget: when its binding's props change it
hands them to an apply(props) callback that pushes them into the widget.
Wire the widget's lifecycle to the binding:

    class CounterLabel(Label):
        def on_mount(self):
            self.binding.did_mount()

        def on_unmount(self):
            self.binding.will_unmount()

    label = CounterLabel()
    label.binding = stx.bind(app, Counter, {}, provide(store), lambda p: label.update(str(p["count"])))

Guard + NoMatches + thread-marshal are enforced here, not at callsites.
Textual coupling is isolated in this module; core snarflux stays agnostic.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

# Apps whose bound widgets hold their updates, by id(app). Never stored on the app.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Hold back widget updates during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Can a TextualHost apply props to its widget right now?"""
    return app.is_running and id(app) not in _paused_apps


class TextualHost:
    """Host that applies a binding's props to a Textual widget.

    Updates requested while the app is paused or not running stay pending
    (and so do the binding's children) until flush() or the next request.
    """

    __slots__ = ("app", "apply", "binding", "_main", "_pending")

    def __init__(self, app, apply) -> None:
        self.app = app
        self.apply = apply
        self.binding = None
        self._main = threading.get_ident()
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def request_update(self) -> None:
        if threading.get_ident() != self._main:
            self.app.call_from_thread(self._update)
        else:
            self._update()

    def receive_props(self, props: dict) -> None:
        """New own props from the parent widget."""
        self.binding.will_receive_props(props)
        self.request_update()

    def flush(self) -> None:
        """Apply an update that was held back while unsafe."""
        if self._pending:
            self._update()

    def _update(self) -> None:
        binding = self.binding
        if binding is None:
            return
        if not is_safe(self.app):
            self._pending = True
            return
        self._pending = False
        if not binding.should_update():
            return
        binding.will_update()
        props = binding.render()
        try:
            self.apply(props)
        except NoMatches:
            pass
        binding.did_update()


def bind(app, connector, own_props, context, apply):
    """Bind connector to a widget driven through apply(props).

    Returns the ContainerBinding; its host is a TextualHost.
    """
    host = TextualHost(app, apply)
    binding = connector.bind(own_props, context=context, host=host)
    host.binding = binding
    return binding
