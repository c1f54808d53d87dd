"""Tests for the connect() facade."""

import logging

import pytest

from snarflux import Direct, Factory, combine_reducers, connect, create_store, provide
from conftest import counter


def store_with_items():
    def items(state=None, action=None):
        state = {"a": "apple", "b": "banana"} if state is None else state
        if action["type"] == "RENAME":
            return {**state, action["id"]: action["name"]}
        return state

    return create_store(combine_reducers({"count": counter, "items": items}))


class TestDefaults:
    def test_display_name(self):
        assert connect(name="TodoList").display_name == "Connect(TodoList)"
        assert connect().display_name == "Connect(Component)"

    def test_no_stages_passes_own_props_and_dispatch(self, make_node):
        store = store_with_items()
        binding, _ = make_node(connect(), provide(store), "X", {"title": "t"})
        assert binding.render() == {"title": "t", "dispatch": store.dispatch}

    def test_state_props_override_own_props(self, make_node):
        store = store_with_items()
        binding, _ = make_node(connect(lambda state: {"title": "from state"}), provide(store), "X", {"title": "own"})
        assert binding.render()["title"] == "from state"

    def test_only_state_mapping_subscribes(self):
        assert connect(lambda state: {}).should_handle_state_changes
        assert not connect(None, lambda dispatch: {}).should_handle_state_changes


class TestArguments:
    @pytest.mark.parametrize(
        "kwargs, argument",
        [
            ({"map_state_to_props": 3}, "map_state_to_props"),
            ({"map_dispatch_to_props": "nope"}, "map_dispatch_to_props"),
            ({"merge_props": [1]}, "merge_props"),
        ],
    )
    def test_invalid_values_rejected_at_connect_time(self, kwargs, argument):
        with pytest.raises(TypeError, match=f"for {argument} argument when connecting component Thing"):
            connect(**kwargs, name="Thing")

    def test_mapping_of_action_creators_is_bound(self, make_node):
        store = store_with_items()

        def rename(item_id, name):
            return {"type": "RENAME", "id": item_id, "name": name}

        Renamer = connect(lambda state: {"items": state["items"]}, {"rename": rename, "note": "skip me"})
        binding, _ = make_node(Renamer, provide(store), "X")
        props = binding.render()
        assert "note" not in props
        assert "dispatch" not in props
        props["rename"]("a", "apricot")
        assert store.get_state()["items"]["a"] == "apricot"

    def test_dispatch_mapping_gets_dispatch(self, make_node):
        store = store_with_items()

        def map_dispatch(dispatch):
            return {"inc": lambda: dispatch({"type": "INC"})}

        binding, _ = make_node(connect(lambda state: {"count": state["count"]}, map_dispatch), provide(store), "X")
        binding.render()["inc"]()
        assert store.get_state()["count"] == 1

    def test_custom_merge(self, make_node):
        store = store_with_items()

        def merge(state_props, dispatch_props, own_props):
            return {"label": f"{own_props['prefix']}:{state_props['count']}"}

        binding, _ = make_node(
            connect(lambda state: {"count": state["count"]}, None, merge), provide(store), "X", {"prefix": "n"}
        )
        assert binding.render() == {"label": "n:0"}


class TestPerInstanceSelectors:
    def test_factory_gives_each_binding_its_own_memo(self, make_node):
        store = store_with_items()
        builds = []

        def make_select_item(state, own_props):
            builds.append(own_props["id"])
            last = {}

            def select_item(state, own_props):
                name = state["items"][own_props["id"]]
                if last.get("name") != name:
                    last["name"] = name
                    last["props"] = {"name": name}
                return last["props"]

            return select_item

        Item = connect(Factory(make_select_item))
        first, _ = make_node(Item, provide(store), "A", {"id": "a"})
        second, _ = make_node(Item, provide(store), "B", {"id": "b"})
        assert builds == ["a", "b"]
        assert first.render()["name"] == "apple"
        assert second.render()["name"] == "banana"

    def test_factory_rerenders_only_affected_binding(self, make_node, render_log):
        store = store_with_items()

        def make_select_item(state, own_props):
            return lambda state, own_props: {"name": state["items"][own_props["id"]]}

        Item = connect(Factory(make_select_item))
        first, _ = make_node(Item, provide(store), "A", {"id": "a"})
        second, _ = make_node(Item, provide(store), "B", {"id": "b"})
        first.did_mount()
        second.did_mount()
        render_log.clear()

        store.dispatch({"type": "RENAME", "id": "b", "name": "blueberry"})
        assert render_log == [("B", {"id": "b", "name": "blueberry", "dispatch": store.dispatch})]

    def test_direct_flag_skips_recompute_on_own_props(self, make_node, render_log):
        store = store_with_items()
        calls = []

        def map_state(*args):
            calls.append(len(args))
            return {"count": args[0]["count"]}

        binding, host = make_node(
            connect(Direct(map_state, depends_on_own_props=False)), provide(store), "X", {"v": 1}
        )
        binding.did_mount()
        host.receive({"v": 2})
        assert calls == [1]
        assert render_log[-1][1]["v"] == 2


class TestWarnings:
    def test_non_plain_merge_result_warns_once(self, make_node, caplog):
        store = store_with_items()

        def merge(state_props, dispatch_props, own_props):
            return ("props", state_props["count"])

        with caplog.at_level(logging.WARNING, logger="snarflux.warning"):
            binding, _ = make_node(
                connect(lambda state: {"count": state["count"]}, None, merge, name="Odd"), provide(store), "X"
            )
            binding.did_mount()
            store.dispatch({"type": "INC"})
            store.dispatch({"type": "INC"})

        records = [r for r in caplog.records if "merge_props()" in r.getMessage()]
        assert len(records) == 1
        assert "in Connect(Odd) must return a plain record" in records[0].getMessage()

    def test_non_plain_state_props_warn(self, make_node, caplog):
        store = store_with_items()
        with caplog.at_level(logging.WARNING, logger="snarflux.warning"):
            make_node(connect(lambda state: None, name="Empty"), provide(store), "X")
        assert "map_state_to_props() in Connect(Empty) must return a plain record" in caplog.text
