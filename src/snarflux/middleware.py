"""Middleware — wrapping dispatch to intercept actions.

A middleware is a curried function:

    def logger(api):
        def wrap(next_dispatch):
            def dispatch(action):
                print("dispatching", action["type"])
                result = next_dispatch(action)
                print("next state", api.get_state())
                return result
            return dispatch
        return wrap

apply_middleware(logger, ...) returns a store enhancer. Since middleware may
swallow or delay actions, it should be the first enhancer in a compose()
chain: enhancers applied on top of it only see the final dispatch.
"""

from __future__ import annotations

import functools
from typing import Any, Callable

from snarflux.errors import IllegalStateError


def _identity(arg):
    return arg


def compose(*funcs: Callable) -> Callable:
    """Compose single-argument functions right to left.

    compose(f, g, h)(x) == f(g(h(x))). The rightmost function may take any
    arguments. With no functions, returns the identity.
    """
    if not funcs:
        return _identity
    if len(funcs) == 1:
        return funcs[0]
    return functools.reduce(lambda a, b: lambda *args, **kwargs: a(b(*args, **kwargs)), funcs)


class MiddlewareAPI:
    """The slice of the store a middleware gets to see."""

    __slots__ = ("get_state", "_dispatch_ref")

    def __init__(self, get_state: Callable[[], Any], dispatch_ref: Callable[[], Callable]) -> None:
        self.get_state = get_state
        self._dispatch_ref = dispatch_ref

    def dispatch(self, action):
        """Dispatch through the whole middleware chain, whenever called."""
        return self._dispatch_ref()(action)


def apply_middleware(*middlewares: Callable) -> Callable:
    """Create a store enhancer that threads dispatch through middlewares.

    Usage:
        store = create_store(reducer, apply_middleware(logger, crash_reporter))
    """

    def enhancer(create_store):
        def create_enhanced_store(reducer, preloaded_state=None):
            store = create_store(reducer, preloaded_state)

            def _dispatch_while_constructing(action):
                raise IllegalStateError(
                    "Dispatching while constructing your middleware is not allowed. "
                    "Other middleware would not be applied to this dispatch."
                )

            dispatch = _dispatch_while_constructing
            api = MiddlewareAPI(store.get_state, lambda: dispatch)
            chain = [middleware(api) for middleware in middlewares]
            dispatch = compose(*chain)(store.dispatch)

            store.dispatch = dispatch
            return store

        return create_enhanced_store

    return enhancer
