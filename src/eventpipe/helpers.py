"""Small stateful and boolean helpers for stage callables.

The with_prev family keeps state in a closure, so create one instance per
place you use it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger("eventpipe")


def with_prev(fn: Callable[[Any, Any], Any], initial: Any = None) -> Callable[[Any], Any]:
    """Call fn(previous_arg, current_arg), remembering the current argument.

    Usage:
        changed = with_prev(lambda prev, cur: prev != cur)
        changed(5)  # True  (None != 5)
        changed(5)  # False
    """
    previous = initial

    def wrapper(current: Any) -> Any:
        nonlocal previous
        result = fn(previous, current)
        previous = current
        return result

    return wrapper


def with_prev_result(fn: Callable[[Any, Any], Any], initial: Any = None) -> Callable[[Any], Any]:
    """Call fn(previous_result, current_arg), remembering the result (a reducer).

    Usage:
        total = with_prev_result(lambda acc, x: acc + x, 0)
        total(5)  # 5
        total(6)  # 11
    """
    previous = initial

    def wrapper(current: Any) -> Any:
        nonlocal previous
        previous = fn(previous, current)
        return previous

    return wrapper


def with_prev_args(fn: Callable[[tuple, tuple], Any], *initial: Any) -> Callable[..., Any]:
    """Call fn(previous_args, current_args) with whole positional-argument tuples."""
    previous = initial

    def wrapper(*current: Any) -> Any:
        nonlocal previous
        result = fn(previous, current)
        previous = current
        return result

    return wrapper


def has_changed(fn: Callable[[Any], Any] | None = None, initial: Any = None) -> Callable[..., bool]:
    """Predicate: is this value (or fn(value)) different from the last one?

    The first call compares against initial, so a first None reports no
    change. Extra positional arguments are ignored, so the predicate can be
    handed straight to filter().
    """
    previous: Any = initial

    def predicate(value: Any, *_rest: Any) -> bool:
        nonlocal previous
        current = fn(value) if fn is not None else value
        changed = previous != current
        previous = current
        return changed

    return predicate


def not_(fn: Callable[..., Any]) -> Callable[..., bool]:
    return lambda *args: not fn(*args)


def bool_(fn: Callable[..., Any]) -> Callable[..., bool]:
    return lambda *args: bool(fn(*args))


def log(msg: str, level: int = logging.INFO) -> Callable[..., Any]:
    """Identity stage callable that logs the value it sees."""

    def _log(value: Any, *_rest: Any) -> Any:
        logger.log(level, "%s %r", msg, value)
        return value

    return _log


def error(msg: str) -> Callable[..., Any]:
    return log(msg, logging.ERROR)
