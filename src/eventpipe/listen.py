"""Source adapters — build a Stream from a concrete event source.

Each adapter is one explicit variant; pick the one matching your source.
Nothing is inferred from the source's shape.

    listen_to_listener(source)       source.add_listener / source.remove_listener
    listen_to_emitter(emitter, ev)   emitter.on(ev, cb) / emitter.remove_listener(ev, cb)
    interval(ms)                     0, 1, 2, ... every ms milliseconds
    event_promise(stream)            future for the first occurrence only
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Any, Callable

from eventpipe._futures import adopt
from eventpipe.errors import ErrorSink
from eventpipe.stream import Callback, Stream
from eventpipe.timer import to_milliseconds


def listen_to_listener(source: Any, *args: Any, on_error: ErrorSink | None = None) -> Stream:
    """Stream over an object with add_listener(callback, *args)/remove_listener(callback)."""

    def attach(callback: Callback) -> Callable[[], None]:
        source.add_listener(callback, *args)
        return lambda: source.remove_listener(callback)

    return Stream(attach, on_error=on_error)


def listen_to_emitter(
    emitter: Any,
    event: str | list[str] | tuple[str, ...],
    *,
    on_error: ErrorSink | None = None,
) -> Stream:
    """Stream over one or more named events of an on()/remove_listener() emitter."""
    events = [event] if isinstance(event, str) else list(event)

    def attach(callback: Callback) -> Callable[[], None]:
        for name in events:
            emitter.on(name, callback)

        def detach() -> None:
            for name in events:
                emitter.remove_listener(name, callback)

        return detach

    return Stream(attach, on_error=on_error)


def interval(
    ms: int | float | str,
    *,
    loop: asyncio.AbstractEventLoop | None = None,
    on_error: ErrorSink | None = None,
) -> Stream:
    """Stream of tick counts (0, 1, 2, ...) every ms milliseconds ("2s" style strings work too).

    Usage:
        interval(1000).filter(lambda n, _: n > 2).clear(lambda n, _: n == 5)
    """
    period = to_milliseconds(ms) / 1000
    if period <= 0:
        raise ValueError(f"interval must be > 0 ms, got {ms!r}")

    def attach(callback: Callback) -> Callable[[], None]:
        event_loop = loop if loop is not None else asyncio.get_running_loop()
        counter = itertools.count()
        handle: asyncio.TimerHandle | None = None

        def tick() -> None:
            nonlocal handle
            # Reschedule first so a clear() inside the pipeline cancels the next tick.
            handle = event_loop.call_later(period, tick)
            callback(next(counter))

        def stop() -> None:
            if handle is not None:
                handle.cancel()

        handle = event_loop.call_later(period, tick)
        return stop

    return Stream(attach, on_error=on_error)


def event_promise(stream: Stream) -> asyncio.Future:
    """Future for the stream's next occurrence; the stream is cleared after it.

    Resolves with the occurrence's result, or fails with its error.
    """
    future = asyncio.get_running_loop().create_future()
    (
        stream.for_each(lambda result, _args: adopt(future, result, None))
        .catch(lambda error, _args: adopt(future, None, error))
        .clear(lambda _result, _args: future.done())
    )
    return future
