"""Small shared helpers: plain-record checks, equality, developer warnings."""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger("snarflux.warning")

# Values compared by equality in shallow_equal; everything else by identity.
_SCALARS = (str, int, float, complex, bool, bytes, type(None))


def warning(message: str) -> None:
    """Report a likely bug without interrupting execution."""
    logger.warning(message)


def is_plain_record(value: Any) -> bool:
    """A plain record is a dict. Subclasses count; other mappings do not."""
    return isinstance(value, dict)


def verify_plain_record(value: Any, display_name: str, method_name: str) -> None:
    if not is_plain_record(value):
        warning(
            f"{method_name}() in {display_name} must return a plain record. "
            f"Instead received {value!r}."
        )


def _same(a: Any, b: Any) -> bool:
    if a is b:
        return True
    if type(a) is not type(b) or not isinstance(a, _SCALARS):
        return False
    # NaN matches NaN, as with identity-based comparison.
    return a == b or (isinstance(a, float) and a != a and b != b)


def strict_equal(a: Any, b: Any) -> bool:
    return a is b


def shallow_equal(a: Any, b: Any) -> bool:
    """Compare two records key by key.

    Values match when they are the same object, or equal scalars of the
    same type. Nested containers are never compared structurally.
    """
    if _same(a, b):
        return True
    if not isinstance(a, dict) or not isinstance(b, dict):
        return False
    if len(a) != len(b):
        return False
    for key, value in a.items():
        if key not in b or not _same(value, b[key]):
            return False
    return True
