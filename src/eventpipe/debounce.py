"""debounce() — only the latest call in a burst resolves True.

The decision function maps each call's input to an outcome:
    a number   wait that many ms; resolve True unless called again first
    a string   a duration such as "300ms" or "2s", handled like a number
    True/False resolve now to that boolean

Any call still pending when the debouncer is called again resolves False.
"""

from __future__ import annotations

from typing import Any, Callable

from eventpipe.timer import Delay, Timer

Decide = Callable[[Any], Delay]


def debounce(decide: Decide) -> Callable[..., Timer]:
    """Build a debouncer around decide.

    Usage:
        debouncer = debounce(lambda text: False if not text else 300)

        async def on_input(text):
            if await debouncer(text):
                search(text)
    """
    pending: Timer | None = None

    def debouncer(value: Any = None) -> Timer:
        nonlocal pending
        outcome = decide(value)

        if pending is not None:
            pending.resolve(False)
            pending = None

        if isinstance(outcome, bool):
            return Timer(outcome)

        pending = Timer(outcome)
        return pending

    return debouncer
