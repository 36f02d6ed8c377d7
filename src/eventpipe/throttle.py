"""throttle() — at most one True per active window.

The decision function maps each call's input to an outcome, as in debounce
(ms numbers, duration strings such as "1s", or booleans). The first call
opens a window with its timer; calls made while that timer is pending
resolve False immediately. A boolean outcome during a window settles the
window's timer to that boolean now.
"""

from __future__ import annotations

from typing import Any, Callable

from eventpipe.timer import Delay, Timer

Decide = Callable[[Any], Delay]


def throttle(decide: Decide) -> Callable[..., Timer]:
    """Build a throttler around decide.

    Usage:
        throttler = throttle(lambda _: 100)

        async def on_scroll(event):
            if await throttler(event):
                redraw()
    """
    pending: Timer | None = None

    def _release(timer: Timer) -> Callable[[Any], Any]:
        def release(value: Any) -> Any:
            nonlocal pending
            if pending is timer:
                pending = None
            return value

        return release

    def throttler(value: Any = None) -> Timer:
        nonlocal pending
        outcome = decide(value)

        if pending is None or pending.done():
            timer = Timer(outcome)
            timer.then(_release(timer), _release(timer))
            pending = timer
            return timer

        if isinstance(outcome, bool):
            pending.resolve(outcome)
        return Timer(False)

    return throttler
