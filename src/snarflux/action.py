"""Actions — plain records describing what happened.

An action is a dict with a ``type`` key that is present and not None.
Types in the ``@@redux/`` namespace are private: reducers must answer them
the same way they answer any unknown type, by returning the current state
(or the initial state when there is none).
"""

from __future__ import annotations

import functools
import random
import string
from collections.abc import Mapping
from typing import Any, Callable

Action = dict
Dispatch = Callable[[Action], Any]


class ActionTypes:
    """Private action types reserved by the store."""

    INIT = "@@redux/INIT"
    PROBE_UNKNOWN_ACTION = "@@redux/PROBE_UNKNOWN_ACTION_"

    @staticmethod
    def probe_unknown() -> str:
        """A fresh type no reducer can have special-cased."""
        chars = random.choices(string.ascii_lowercase + string.digits, k=6)
        return ActionTypes.PROBE_UNKNOWN_ACTION + ".".join(chars)


def bind_action_creator(action_creator: Callable[..., Action], dispatch: Dispatch):
    @functools.wraps(action_creator)
    def bound(*args, **kwargs):
        return dispatch(action_creator(*args, **kwargs))

    return bound


def bind_action_creators(action_creators, dispatch: Dispatch):
    """Wrap action creators so calling them dispatches their result.

    A single callable comes back as a single bound callable. A mapping comes
    back as a new dict of bound callables; non-callable entries are dropped.

    Usage:
        def increment(by=1):
            return {"type": "INC", "by": by}

        actions = bind_action_creators({"increment": increment}, store.dispatch)
        actions["increment"](2)  # dispatches {"type": "INC", "by": 2}
    """
    if callable(action_creators):
        return bind_action_creator(action_creators, dispatch)

    if not isinstance(action_creators, Mapping):
        raise TypeError(
            "bind_action_creators expected a mapping or a callable, instead "
            f"received {type(action_creators).__name__}."
        )

    return {
        key: bind_action_creator(creator, dispatch)
        for key, creator in action_creators.items()
        if callable(creator)
    }
