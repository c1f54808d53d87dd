"""Data anchor — plain Python structures that outlive module reloads.

Connector versions are drawn from here rather than from the behavior
modules, so reloading snarflux.binding never restarts the sequence and a
reloaded connector always compares as newer than the bindings built from
its predecessor.
"""

import itertools

# Version generation: itertools.count is thread-safe (C-level GIL atomic)
_version_counter = itertools.count(1)


def new_version() -> int:
    return next(_version_counter)
