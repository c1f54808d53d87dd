"""Selectors — derive a container's props from state, dispatch and own props.

Final props come out of three stages:

    state_props    = map_state_to_props(state, own_props)
    dispatch_props = map_dispatch_to_props(dispatch, own_props)
    final_props    = merge_props(state_props, dispatch_props, own_props)

Each map stage knows whether it reads own props (``depends_on_own_props``).
A stage that does not is called with its first argument only and is not
re-run when only own props change.

A stage is described by one of:
- a plain callable, or Direct(fn): used as-is. Whether it reads own props
  comes from Direct's explicit flag, or else from its signature: exactly
  one positional parameter means it does not; zero parameters or *args
  mean it might, so it is treated as if it does.
- Factory(build): a two-phase builder. The first time a container runs the
  stage, build(first_arg, own_props) returns the selector to use from then
  on, for that container only. Handy for per-instance caches.

In pure mode (the default) every stage is skipped when its inputs compare
equal, and a merged result equal to the previous one is replaced by the
previous one, so an unchanged result is recognisable by identity.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable

from snarflux._utils import shallow_equal, strict_equal, verify_plain_record, warning

Equality = Callable[[Any, Any], bool]


@dataclass(frozen=True)
class Direct:
    """A selector used as given."""

    fn: Callable
    depends_on_own_props: bool | None = None


@dataclass(frozen=True)
class Factory:
    """A builder run once per container that returns the real selector."""

    build: Callable


def _positional_arity(fn: Callable) -> int | None:
    """Positional parameter count, or None when it is open-ended or unknown."""
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return None
    count = 0
    for param in params:
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def get_depends_on_own_props(selector) -> bool:
    if isinstance(selector, Direct):
        if selector.depends_on_own_props is not None:
            return selector.depends_on_own_props
        selector = selector.fn
    explicit = getattr(selector, "depends_on_own_props", None)
    if explicit is not None:
        return bool(explicit)
    return _positional_arity(selector) != 1


def _unwrap(selector) -> Callable:
    return selector.fn if isinstance(selector, Direct) else selector


@dataclass
class SelectorOptions:
    """Everything a selector factory needs to know about one connector."""

    init_map_state_to_props: Callable | None = None
    init_map_dispatch_to_props: Callable | None = None
    init_merge_props: Callable | None = None
    display_name: str = "Connect(Component)"
    pure: bool = True
    are_states_equal: Equality = strict_equal
    are_own_props_equal: Equality = shallow_equal
    are_state_props_equal: Equality = shallow_equal
    are_merged_props_equal: Equality = shallow_equal


# ─── Map stages ──────────────────────────────────────────────────────────────


class SelectorStage:
    """Per-container proxy around a map_state/map_dispatch selector.

    Resolves Factory builders and infers depends_on_own_props on the first
    call, and checks that first result is a plain record.
    """

    __slots__ = ("_source", "_selector", "depends_on_own_props", "_display_name", "_method_name")

    def __init__(self, source, display_name: str, method_name: str) -> None:
        self._source = source
        self._selector: Callable | None = None
        # True until resolved, so the first call always sees own props.
        self.depends_on_own_props = True
        self._display_name = display_name
        self._method_name = method_name

    def __call__(self, state_or_dispatch, own_props):
        if self._selector is None:
            return self._resolve_and_verify(state_or_dispatch, own_props)
        return self._invoke(state_or_dispatch, own_props)

    def _invoke(self, state_or_dispatch, own_props):
        if self.depends_on_own_props:
            return self._selector(state_or_dispatch, own_props)
        return self._selector(state_or_dispatch)

    def _adopt(self, selector) -> None:
        self._selector = _unwrap(selector)
        self.depends_on_own_props = get_depends_on_own_props(selector)

    def _resolve_and_verify(self, state_or_dispatch, own_props):
        source = self._source
        if isinstance(source, Factory):
            selector = source.build(state_or_dispatch, own_props)
            if not (callable(selector) or isinstance(selector, Direct)):
                raise TypeError(
                    f"The {self._method_name} factory in {self._display_name} must "
                    f"return a selector. Instead received {selector!r}."
                )
            self._adopt(selector)
        else:
            self._adopt(source)

        props = self._invoke(state_or_dispatch, own_props)
        verify_plain_record(props, self._display_name, self._method_name)
        return props

    def __repr__(self) -> str:
        state = "unresolved" if self._selector is None else f"own_props={self.depends_on_own_props}"
        return f"SelectorStage({self._method_name}, {state})"


def wrap_map_to_props(source, method_name: str) -> Callable:
    """Turn a stage description into an init function (dispatch, options) -> stage."""

    def init_proxy_selector(dispatch, options: SelectorOptions) -> SelectorStage:
        return SelectorStage(source, options.display_name, method_name)

    return init_proxy_selector


def wrap_map_to_props_constant(get_constant: Callable) -> Callable:
    """Init function for a stage whose result never changes for a container."""

    def init_constant_selector(dispatch, options: SelectorOptions):
        constant = get_constant(dispatch)

        def constant_selector(state_or_dispatch=None, own_props=None):
            return constant

        constant_selector.depends_on_own_props = False
        return constant_selector

    return init_constant_selector


# ─── Merge stage ─────────────────────────────────────────────────────────────


def default_merge_props(state_props: dict, dispatch_props: dict, own_props: dict) -> dict:
    return {**own_props, **state_props, **dispatch_props}


class MergeStage:
    """Per-container proxy around a merge_props function.

    In pure mode the previous merged result is kept whenever the new one
    compares equal to it.
    """

    __slots__ = ("_source", "_merge", "_pure", "_are_equal", "_display_name", "_has_run_once", "_merged")

    def __init__(self, source, options: SelectorOptions) -> None:
        self._source = source
        self._merge: Callable | None = None
        self._pure = options.pure
        self._are_equal = options.are_merged_props_equal
        self._display_name = options.display_name
        self._has_run_once = False
        self._merged = None

    def __call__(self, state_props, dispatch_props, own_props):
        if self._merge is None:
            source = self._source
            if isinstance(source, Factory):
                source = source.build(state_props, dispatch_props, own_props)
            self._merge = _unwrap(source)

        next_merged = self._merge(state_props, dispatch_props, own_props)

        if self._has_run_once:
            if not self._pure or not self._are_equal(next_merged, self._merged):
                self._merged = next_merged
        else:
            self._has_run_once = True
            self._merged = next_merged
            verify_plain_record(next_merged, self._display_name, "merge_props")

        return self._merged


def wrap_merge_props(source) -> Callable:
    def init_merge_props_proxy(dispatch, options: SelectorOptions) -> MergeStage:
        return MergeStage(source, options)

    return init_merge_props_proxy


def init_default_merge_props(dispatch, options: SelectorOptions):
    return default_merge_props


# ─── Final props selectors ───────────────────────────────────────────────────


class ImpureFinalPropsSelector:
    """Recomputes every stage on every call."""

    __slots__ = ("map_state_to_props", "map_dispatch_to_props", "merge_props", "dispatch")

    def __init__(self, map_state_to_props, map_dispatch_to_props, merge_props, dispatch) -> None:
        self.map_state_to_props = map_state_to_props
        self.map_dispatch_to_props = map_dispatch_to_props
        self.merge_props = merge_props
        self.dispatch = dispatch

    def __call__(self, state, own_props):
        return self.merge_props(
            self.map_state_to_props(state, own_props),
            self.map_dispatch_to_props(self.dispatch, own_props),
            own_props,
        )


class PureFinalPropsSelector:
    """Memoized final props: reruns only the stages whose inputs changed.

    - own props and state both changed: state stage always, dispatch stage
      if it reads own props, then merge
    - only own props changed: each map stage that reads own props, then merge
    - only state changed: state stage; merge only if its result changed
    - nothing changed: the previous result, untouched
    """

    __slots__ = (
        "map_state_to_props", "map_dispatch_to_props", "merge_props", "dispatch", "_options",
        "_has_run", "_state", "_own_props", "_state_props", "_dispatch_props", "_merged_props",
    )

    def __init__(self, map_state_to_props, map_dispatch_to_props, merge_props, dispatch, options: SelectorOptions) -> None:
        self.map_state_to_props = map_state_to_props
        self.map_dispatch_to_props = map_dispatch_to_props
        self.merge_props = merge_props
        self.dispatch = dispatch
        self._options = options
        self._has_run = False
        self._state = None
        self._own_props = None
        self._state_props = None
        self._dispatch_props = None
        self._merged_props = None

    def __call__(self, state, own_props):
        if self._has_run:
            return self._handle_subsequent_calls(state, own_props)
        return self._handle_first_call(state, own_props)

    def _handle_first_call(self, state, own_props):
        self._state = state
        self._own_props = own_props
        self._state_props = self.map_state_to_props(state, own_props)
        self._dispatch_props = self.map_dispatch_to_props(self.dispatch, own_props)
        self._merged_props = self.merge_props(self._state_props, self._dispatch_props, own_props)
        self._has_run = True
        return self._merged_props

    def _handle_new_props_and_new_state(self):
        self._state_props = self.map_state_to_props(self._state, self._own_props)
        if self.map_dispatch_to_props.depends_on_own_props:
            self._dispatch_props = self.map_dispatch_to_props(self.dispatch, self._own_props)
        self._merged_props = self.merge_props(self._state_props, self._dispatch_props, self._own_props)
        return self._merged_props

    def _handle_new_props(self):
        if self.map_state_to_props.depends_on_own_props:
            self._state_props = self.map_state_to_props(self._state, self._own_props)
        if self.map_dispatch_to_props.depends_on_own_props:
            self._dispatch_props = self.map_dispatch_to_props(self.dispatch, self._own_props)
        self._merged_props = self.merge_props(self._state_props, self._dispatch_props, self._own_props)
        return self._merged_props

    def _handle_new_state(self):
        next_state_props = self.map_state_to_props(self._state, self._own_props)
        state_props_changed = not self._options.are_state_props_equal(next_state_props, self._state_props)
        self._state_props = next_state_props
        if state_props_changed:
            self._merged_props = self.merge_props(self._state_props, self._dispatch_props, self._own_props)
        return self._merged_props

    def _handle_subsequent_calls(self, next_state, next_own_props):
        props_changed = not self._options.are_own_props_equal(next_own_props, self._own_props)
        state_changed = not self._options.are_states_equal(next_state, self._state)
        self._state = next_state
        self._own_props = next_own_props

        if props_changed and state_changed:
            return self._handle_new_props_and_new_state()
        if props_changed:
            return self._handle_new_props()
        if state_changed:
            return self._handle_new_state()
        return self._merged_props


def _verify(selector, method_name: str, display_name: str) -> None:
    if not callable(selector):
        raise TypeError(f"Unexpected value for {method_name} in {display_name}.")
    if method_name != "merge_props" and getattr(selector, "depends_on_own_props", None) is None:
        warning(f"The selector for {method_name} of {display_name} did not specify a value for depends_on_own_props.")


def final_props_selector_factory(dispatch, options: SelectorOptions):
    """Build the (state, own_props) -> final props selector for one container."""
    map_state_to_props = options.init_map_state_to_props(dispatch, options)
    map_dispatch_to_props = options.init_map_dispatch_to_props(dispatch, options)
    merge_props = options.init_merge_props(dispatch, options)

    _verify(map_state_to_props, "map_state_to_props", options.display_name)
    _verify(map_dispatch_to_props, "map_dispatch_to_props", options.display_name)
    _verify(merge_props, "merge_props", options.display_name)

    if options.pure:
        return PureFinalPropsSelector(map_state_to_props, map_dispatch_to_props, merge_props, dispatch, options)
    return ImpureFinalPropsSelector(map_state_to_props, map_dispatch_to_props, merge_props, dispatch)
