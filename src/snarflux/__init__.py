"""Snarflux: Redux-inspired unidirectional state management for Python."""

from importlib.metadata import version as _version

__version__ = _version("snarflux")

from snarflux._utils import shallow_equal, strict_equal
from snarflux.errors import SnarfluxError, IllegalStateError, ReducerError
from snarflux.action import ActionTypes, bind_action_creators
from snarflux.store import Store, create_store, set_scheduler
from snarflux.reducers import combine_reducers
from snarflux.middleware import compose, apply_middleware, MiddlewareAPI
from snarflux.subscription import Subscription
from snarflux.selector import Direct, Factory
from snarflux.binding import BindingContext, Connector, ContainerBinding, connect_advanced, provide
from snarflux.connect import connect
# hot_reload and textual NOT auto-imported: opt-in only

__all__ = [
    "ActionTypes",
    "bind_action_creators",
    "Store",
    "create_store",
    "set_scheduler",
    "combine_reducers",
    "compose",
    "apply_middleware",
    "MiddlewareAPI",
    "Subscription",
    "Direct",
    "Factory",
    "BindingContext",
    "Connector",
    "ContainerBinding",
    "connect_advanced",
    "provide",
    "connect",
    "shallow_equal",
    "strict_equal",
    "SnarfluxError",
    "IllegalStateError",
    "ReducerError",
]
