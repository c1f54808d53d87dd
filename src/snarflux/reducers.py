"""Reducer composition — one reducer per key of a record-shaped state.

combine_reducers({"todos": todos, "filter": visibility}) returns a reducer
whose state is {"todos": ..., "filter": ...}; each sub-reducer only ever
sees its own slice.

Shape problems are found once, when the reducers are combined, but only
raised on the first call, so they surface during a dispatch with the action
in hand rather than at import time.
"""

from __future__ import annotations

from typing import Any, Callable

from snarflux._utils import is_plain_record, warning
from snarflux.action import ActionTypes
from snarflux.errors import ReducerError

Reducer = Callable[[Any, dict], Any]


def _undefined_state_message(key: str, action) -> str:
    action_type = action.get("type") if isinstance(action, dict) else None
    action_name = f'"{action_type}"' if action_type is not None else "an action"
    return (
        f'Given action {action_name}, reducer "{key}" returned None. '
        "To ignore an action, you must explicitly return the previous state. "
        "If you want this reducer to hold no value, return an empty value "
        "instead of None."
    )


def _unexpected_shape_message(state, reducers: dict, action, unexpected_key_cache: set) -> str | None:
    reducer_keys = list(reducers)
    is_init = isinstance(action, dict) and action.get("type") == ActionTypes.INIT
    argument_name = (
        "preloaded_state argument passed to create_store"
        if is_init
        else "previous state received by the reducer"
    )

    if not reducer_keys:
        return (
            "Store does not have a valid reducer. Make sure the argument passed "
            "to combine_reducers is a mapping whose values are reducers."
        )

    if not is_plain_record(state):
        return (
            f'The {argument_name} has unexpected type of "{type(state).__name__}". '
            "Expected argument to be a record with the following keys: "
            f'"{", ".join(map(str, reducer_keys))}"'
        )

    unexpected = [k for k in state if k not in reducers and k not in unexpected_key_cache]
    unexpected_key_cache.update(unexpected)

    if unexpected:
        noun = "keys" if len(unexpected) > 1 else "key"
        return (
            f'Unexpected {noun} "{", ".join(map(str, unexpected))}" found in {argument_name}. '
            "Expected to find one of the known reducer keys instead: "
            f'"{", ".join(map(str, reducer_keys))}". Unexpected keys will be ignored.'
        )
    return None


def _assert_reducer_shape(reducers: dict) -> None:
    for key, reducer in reducers.items():
        if reducer(None, {"type": ActionTypes.INIT}) is None:
            raise ReducerError(
                f'Reducer "{key}" returned None during initialization. '
                "If the state passed to the reducer is None, you must explicitly "
                "return the initial state. The initial state may not be None."
            )

        probe = ActionTypes.probe_unknown()
        if reducer(None, {"type": probe}) is None:
            raise ReducerError(
                f'Reducer "{key}" returned None when probed with a random type. '
                f'Don\'t try to handle {ActionTypes.INIT} or other actions in the "@@redux/" '
                "namespace. They are considered private. Instead, you must return the "
                "current state for any unknown actions, unless it is None, in which "
                "case you must return the initial state, regardless of the action type."
            )


def combine_reducers(reducers: dict[str, Reducer]) -> Reducer:
    """Merge a mapping of key -> reducer into a single reducer.

    The combined reducer returns the very same state object when no slice
    changed (compared by identity), so consumers can skip work cheaply.

    Usage:
        def count(state=None, action=None):
            state = 0 if state is None else state
            return state + 1 if action["type"] == "INC" else state

        def log(state=None, action=None):
            state = () if state is None else state
            return state + (action["type"],) if action["type"] == "INC" else state

        root = combine_reducers({"count": count, "log": log})
        store = create_store(root)
        store.get_state()  # {"count": 0, "log": ()}
    """
    final_reducers: dict[str, Reducer] = {}
    for key, reducer in reducers.items():
        if reducer is None:
            warning(f'No reducer provided for key "{key}"')
        if callable(reducer):
            final_reducers[key] = reducer

    unexpected_key_cache: set = set()

    shape_error: Exception | None = None
    try:
        _assert_reducer_shape(final_reducers)
    except Exception as e:
        shape_error = e

    def combination(state=None, action=None):
        if shape_error is not None:
            raise shape_error

        if state is None:
            state = {}

        message = _unexpected_shape_message(state, final_reducers, action, unexpected_key_cache)
        if message:
            warning(message)
        if not is_plain_record(state):
            state = {}

        has_changed = False
        next_state = {}
        for key, reducer in final_reducers.items():
            previous_for_key = state.get(key)
            next_for_key = reducer(previous_for_key, action)
            if next_for_key is None:
                raise ReducerError(_undefined_state_message(key, action))
            next_state[key] = next_for_key
            has_changed = has_changed or next_for_key is not previous_for_key

        return next_state if has_changed else state

    return combination
