"""Hot-reload-aware store and connectors. Opt-in — import only if you need hot-reload support."""

import logging

from snarflux.action import ActionTypes
from snarflux.store import Store

logger = logging.getLogger("snarflux.hot_reload")


class HotReloadStore(Store):
    """Store that survives module reloads via safe reducer replacement.

    Same API as Store. Adds:
    - Exception safety: replace_reducer catches and logs reducer failures
    - Logging: replacements are clearly logged
    - Degraded operation: if the new reducer fails, the previous reducer
      and the current state stay in place
    """

    def replace_reducer(self, next_reducer):
        """Safe replacement: a failing reducer is logged and rolled back.

        Listeners run only after the swap is committed; their errors propagate
        as they would from dispatch().
        """
        if not callable(next_reducer):
            raise TypeError("Expected the next_reducer to be a callable.")

        previous, previous_state = self._reducer, self._state
        self._reducer = next_reducer
        try:
            self._reduce({"type": ActionTypes.INIT})
        except Exception:
            logger.exception("Failed to initialize replacement reducer")
            # Store continues: state intact, old reducer (degraded)
            self._reducer = previous
            self._state = previous_state
            return

        logger.info(
            "Replaced reducer: %s -> %s",
            getattr(previous, "__name__", repr(previous)),
            getattr(next_reducer, "__name__", repr(next_reducer)),
        )
        # Committed: listener failures propagate like any dispatch.
        self._listeners.notify()


def reload_connector(connector, replacement) -> None:
    """Point a live connector at reloaded selector logic.

    Bindings built from connector rebuild their selectors on their next
    recompute; their subscriptions, and the children attached to them,
    are kept.
    """
    old_version = connector.version
    connector.reconcile(replacement)
    logger.info(
        "Reloaded %s: v%d->v%d",
        connector.display_name, old_version, connector.version,
    )
