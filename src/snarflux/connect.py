"""connect() — the everyday way to build a Connector.

connect() turns three optional stage descriptions into a Connector:

    def map_state(state, own_props):
        return {"todo": state["todos"][own_props["todo_id"]]}

    def map_dispatch(dispatch):
        return {"toggle": lambda todo_id: dispatch({"type": "TOGGLE", "id": todo_id})}

    TodoItem = connect(map_state, map_dispatch, name="TodoItem")

Missing stages get defaults: without map_state_to_props the container
derives nothing from state and does not subscribe to the store; without
map_dispatch_to_props it receives {"dispatch": dispatch}; a mapping of
action creators for map_dispatch_to_props is bound to dispatch; without
merge_props the result is {**own_props, **state_props, **dispatch_props}.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Callable

from snarflux._utils import shallow_equal, strict_equal
from snarflux.action import bind_action_creators
from snarflux.binding import Connector, connect_advanced
from snarflux.selector import (
    Direct,
    Equality,
    Factory,
    SelectorOptions,
    final_props_selector_factory,
    init_default_merge_props,
    wrap_map_to_props,
    wrap_map_to_props_constant,
    wrap_merge_props,
)


def _is_selector(value) -> bool:
    return callable(value) or isinstance(value, (Direct, Factory))


def _invalid(value, argument: str, name: str) -> TypeError:
    return TypeError(
        f"Invalid value of type {type(value).__name__} for {argument} "
        f"argument when connecting component {name}."
    )


def _match_map_state_to_props(map_state_to_props, name: str) -> Callable:
    if map_state_to_props is None:
        return wrap_map_to_props_constant(lambda dispatch: {})
    if _is_selector(map_state_to_props):
        return wrap_map_to_props(map_state_to_props, "map_state_to_props")
    raise _invalid(map_state_to_props, "map_state_to_props", name)


def _match_map_dispatch_to_props(map_dispatch_to_props, name: str) -> Callable:
    if map_dispatch_to_props is None:
        return wrap_map_to_props_constant(lambda dispatch: {"dispatch": dispatch})
    if isinstance(map_dispatch_to_props, Mapping):
        return wrap_map_to_props_constant(lambda dispatch: bind_action_creators(map_dispatch_to_props, dispatch))
    if _is_selector(map_dispatch_to_props):
        return wrap_map_to_props(map_dispatch_to_props, "map_dispatch_to_props")
    raise _invalid(map_dispatch_to_props, "map_dispatch_to_props", name)


def _match_merge_props(merge_props, name: str) -> Callable:
    if merge_props is None:
        return init_default_merge_props
    if _is_selector(merge_props):
        return wrap_merge_props(merge_props)
    raise _invalid(merge_props, "merge_props", name)


def connect(
    map_state_to_props=None,
    map_dispatch_to_props=None,
    merge_props=None,
    *,
    name: str = "Component",
    pure: bool = True,
    are_states_equal: Equality = strict_equal,
    are_own_props_equal: Equality = shallow_equal,
    are_state_props_equal: Equality = shallow_equal,
    are_merged_props_equal: Equality = shallow_equal,
    render_count_prop: str | None = None,
    defer_errors: bool = True,
) -> Connector:
    """Build a Connector from map/merge stages. See the module docstring."""
    display_name = f"Connect({name})"
    options = SelectorOptions(
        init_map_state_to_props=_match_map_state_to_props(map_state_to_props, name),
        init_map_dispatch_to_props=_match_map_dispatch_to_props(map_dispatch_to_props, name),
        init_merge_props=_match_merge_props(merge_props, name),
        display_name=display_name,
        pure=pure,
        are_states_equal=are_states_equal,
        are_own_props_equal=are_own_props_equal,
        are_state_props_equal=are_state_props_equal,
        are_merged_props_equal=are_merged_props_equal,
    )
    return connect_advanced(
        final_props_selector_factory,
        options,
        name=name,
        get_display_name=lambda _: display_name,
        method_name="connect",
        render_count_prop=render_count_prop,
        should_handle_state_changes=map_state_to_props is not None,
        defer_errors=defer_errors,
    )
