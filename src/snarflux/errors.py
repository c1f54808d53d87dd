"""Exception hierarchy for contract violations.

Wrong argument types raise the builtin TypeError. The classes below cover
the remaining failures and double as their builtin counterparts so callers
can catch either.
"""


class SnarfluxError(Exception):
    """Base class for snarflux errors."""


class IllegalStateError(SnarfluxError, RuntimeError):
    """Operation attempted at a point where the store forbids it.

    Raised when a reducer dispatches, or when middleware dispatches while
    the middleware chain is still being built.
    """


class ReducerError(SnarfluxError, ValueError):
    """A reducer broke its contract (returned None, failed shape probing)."""
