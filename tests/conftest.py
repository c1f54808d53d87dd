"""Shared fixtures: reducers and a synchronous host tree for binding tests."""

import pytest


def counter(state=None, action=None):
    state = 0 if state is None else state
    if action["type"] == "INC":
        return state + 1
    if action["type"] == "DEC":
        return state - 1
    return state


class SyncHost:
    """Host that recomputes a node immediately, like an unbatched renderer.

    Every render is appended to the shared log as (name, props) so tests
    can check the order nodes recompute in.
    """

    def __init__(self, name, log, on_render=None):
        self.name = name
        self.log = log
        self.on_render = on_render
        self.binding = None
        self.errors = []

    def request_update(self):
        self.update()

    def receive(self, props):
        self.binding.will_receive_props(props)
        self.update()

    def update(self):
        binding = self.binding
        if not binding.should_update():
            return
        binding.will_update()
        try:
            props = binding.render()
        except Exception as e:
            self.errors.append(e)
            return
        self.log.append((self.name, props))
        if self.on_render is not None:
            self.on_render(props)
        binding.did_update()


@pytest.fixture
def render_log():
    return []


@pytest.fixture
def make_node(render_log):
    """Bind a connector to a SyncHost. Call .did_mount() yourself."""

    def _make(connector, context, name, own_props=None, on_render=None):
        host = SyncHost(name, render_log, on_render)
        binding = connector.bind(own_props or {}, context=context, host=host)
        host.binding = binding
        return binding, host

    return _make
