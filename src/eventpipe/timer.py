"""Timer — a cancellable, externally settleable delayed completion.

A Timer wraps an asyncio.Future and at most one loop.call_later handle.
    Timer(True) / Timer(False)  settled immediately to that boolean
    Timer(5)                    resolves to value (default True) after 5ms
    Timer("2s")                 duration strings are accepted too

resolve()/reject() settle it now and cancel the scheduled completion.
clear() cancels the scheduled completion without settling; the timer stays
pending until something resolves or rejects it.

then()/catch() return chained timers: they settle with the continuation's
outcome but resolve/reject/clear still act on the timer they came from.
Timers are awaitable.
"""

from __future__ import annotations

import asyncio
import inspect
from numbers import Real
from typing import Any, Callable, Generator

from humanfriendly import InvalidTimespan, parse_timespan

from eventpipe._futures import adopt, settlement
from eventpipe.errors import TimerRejected

Delay = bool | int | float | str


def to_milliseconds(duration: int | float | str) -> float:
    """Milliseconds for a number of ms or a duration string ("250ms", "10s", "1 minute").

    A string holding only a number is read as milliseconds.
    """
    if isinstance(duration, str):
        try:
            return float(duration)
        except ValueError:
            pass
        try:
            return parse_timespan(duration) * 1000
        except InvalidTimespan as exc:
            raise ValueError(f"invalid duration {duration!r}") from exc
    if isinstance(duration, bool) or not isinstance(duration, Real):
        raise TypeError(f"duration must be a number of milliseconds or a string, got {duration!r}")
    return duration


class Timer:
    """Promise-like delayed completion driven by the running asyncio loop."""

    __slots__ = ("_loop", "_future", "_root", "_handle")

    def __init__(
        self,
        delay: Delay = 0,
        value: Any = True,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if not isinstance(delay, bool):
            delay = to_milliseconds(delay)
            if delay < 0:
                raise ValueError(f"delay must be >= 0, got {delay!r}")

        self._loop = loop if loop is not None else asyncio.get_running_loop()
        self._future: asyncio.Future = self._loop.create_future()
        self._root = self
        self._handle: asyncio.TimerHandle | None = None

        if isinstance(delay, bool):
            self._future.set_result(delay)
        else:
            self._handle = self._loop.call_later(delay / 1000, self._settle, value, None)

    @classmethod
    def _chained(cls, root: Timer, future: asyncio.Future) -> Timer:
        timer = cls.__new__(cls)
        timer._loop = root._loop
        timer._future = future
        timer._root = root
        timer._handle = None
        return timer

    # --- Settlement ---

    def resolve(self, value: Any = True) -> Timer:
        """Settle the timer now with value. No-op once settled."""
        self._root._settle(value, None)
        return self

    def reject(self, error: Any) -> Timer:
        """Settle the timer now with an error. No-op once settled."""
        if not isinstance(error, BaseException):
            error = TimerRejected(error)
        self._root._settle(None, error)
        return self

    def clear(self) -> Timer:
        """Cancel the scheduled completion. The timer stays pending."""
        self._root._cancel_handle()
        return self

    def _settle(self, value: Any, error: BaseException | None) -> None:
        self._cancel_handle()
        adopt(self._future, value, error)

    def _cancel_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    # --- Chaining ---

    def then(
        self,
        on_fulfilled: Callable[[Any], Any] | None = None,
        on_rejected: Callable[[BaseException], Any] | None = None,
    ) -> Timer:
        """Chain a continuation. Awaitable return values are adopted."""
        loop = self._loop
        chained: asyncio.Future = loop.create_future()

        def _continue(source: asyncio.Future) -> None:
            value, exc = settlement(source)
            handler = on_fulfilled if exc is None else on_rejected
            if handler is None:
                adopt(chained, value, exc)
                return
            try:
                outcome = handler(value if exc is None else exc)
            except Exception as err:
                adopt(chained, None, err)
                return
            if inspect.isawaitable(outcome):
                inner = asyncio.ensure_future(outcome, loop=loop)
                inner.add_done_callback(lambda done: adopt(chained, *settlement(done)))
            else:
                adopt(chained, outcome, None)

        self._future.add_done_callback(_continue)
        return Timer._chained(self._root, chained)

    def catch(self, on_rejected: Callable[[BaseException], Any]) -> Timer:
        return self.then(None, on_rejected)

    # --- State ---

    @property
    def pending(self) -> bool:
        return not self._future.done()

    @property
    def scheduled(self) -> bool:
        """Whether a completion is still scheduled on the loop."""
        return self._root._handle is not None

    def done(self) -> bool:
        return self._future.done()

    def result(self) -> Any:
        """The settled value. Raises if rejected or still pending."""
        return self._future.result()

    def __await__(self) -> Generator[Any, None, Any]:
        return self._future.__await__()

    def __repr__(self) -> str:
        if self.pending:
            state = "scheduled" if self.scheduled else "pending"
        else:
            value, exc = settlement(self._future)
            state = f"rejected={exc!r}" if exc is not None else f"resolved={value!r}"
        return f"Timer({state})"


def timeout(delay: Delay, value: Any = True) -> Timer:
    """Timer that resolves to value after delay milliseconds.

    Usage:
        await timeout(10)                  # True after 10ms
        t = timeout(500).then(on_done)
        t.clear()                          # on_done never runs...
        t.resolve("now")                   # ...unless settled explicitly
    """
    return Timer(delay, value)


def create_timer(delay: Delay) -> Timer:
    """Timer that settles to True after delay ms, or now to delay if it is a bool."""
    return Timer(delay)
