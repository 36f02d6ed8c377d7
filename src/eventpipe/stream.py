"""Stream — a stage pipeline attached once to an event source.

A source adapter supplies attach(callback) -> unsubscribe. The stream calls
attach once; every time the source invokes the callback, a fresh Payload
runs through the registered stages in order and ends at the terminal sink.

Stages are accumulated in a list and compiled into a single transform the
first time an occurrence needs it after a change. Register stages before
the source starts emitting: a stage added later applies only to later
occurrences.

await_map/await_filter return a nested Stream. Its send() is the channel
that async completions are written into; clear() on any stream in the chain
unsubscribes the original source.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable

from eventpipe._futures import settlement
from eventpipe.errors import ErrorSink, get_error_sink, notify
from eventpipe.payload import Payload
from eventpipe.stages import (
    Stage,
    await_filter_stage,
    await_map_stage,
    catch_stage,
    clear_stage,
    filter_stage,
    for_each_stage,
    map_stage,
)

logger = logging.getLogger("eventpipe.stream")

Callback = Callable[..., Any]
Attach = Callable[[Callback], Callable[[], Any]]


class _Subscription:
    """The unsubscribe capability returned by attach. Runs at most once."""

    __slots__ = ("_unsubscribe", "_closed", "_result")

    def __init__(self, unsubscribe: Callable[[], Any]) -> None:
        self._unsubscribe = unsubscribe
        self._closed = False
        self._result = None

    @property
    def closed(self) -> bool:
        return self._closed

    def __call__(self) -> Any:
        if not self._closed:
            self._closed = True
            self._result = self._unsubscribe()
            logger.debug("Unsubscribed %r", self._unsubscribe)
        return self._result


class Stream:
    """Fluent stage pipeline over one attached source."""

    def __init__(self, attach: Attach, *, on_error: ErrorSink | None = None) -> None:
        self._stages: list[Stage] = []
        self._compiled: Stage | None = None
        self._on_error = on_error

        unsubscribe = attach(self._dispatch)
        if isinstance(unsubscribe, _Subscription):
            self._subscription = unsubscribe
        elif callable(unsubscribe):
            self._subscription = _Subscription(unsubscribe)
        else:
            raise TypeError(f"attach must return an unsubscribe function, got {unsubscribe!r}")

    # --- Entry points ---

    def _dispatch(self, *args: Any) -> Any:
        """Occurrence entry point handed to attach."""
        return self.send(Payload.from_occurrence(*args))

    def send(self, payload: Payload) -> Any:
        """Run a ready-made payload through the pipeline and the sink."""
        return self._sink(self._transform()(payload))

    # --- Stage registration ---

    def map(self, fn: Callable[[Any, tuple], Any]) -> Stream:
        """Replace result with fn(result, args)."""
        return self._extend(map_stage(fn))

    def for_each(self, fn: Callable[[Any, tuple], Any]) -> Stream:
        """Call fn(result, args) for its effect. The return value is ignored."""
        return self._extend(for_each_stage(fn))

    forEach = for_each

    def filter(self, predicate: Callable[[Any, tuple], Any]) -> Stream:
        """Skip later map/for_each stages when predicate(result, args) is falsy."""
        return self._extend(filter_stage(predicate))

    def catch(self, handler: Callable[[Any, tuple], Any]) -> Stream:
        """Recover from an error: result = handler(error, args)."""
        return self._extend(catch_stage(handler))

    def clear(self, predicate: Callable[[Any, tuple], Any] | None = None) -> Any:
        """Unsubscribe from the source.

        Without a predicate this happens now and the unsubscribe function's
        return value is returned. With one, a stage is added that
        unsubscribes once predicate(result, args) is true, and the stream is
        returned for chaining.
        """
        if predicate is None:
            return self._subscription()
        return self._extend(clear_stage(self._subscription, predicate))

    def await_map(self, fn: Callable[[Any, tuple], Awaitable[Any] | Any]) -> Stream:
        """Await fn(result, args); later stages see the resolved value."""
        nested = self._nested()
        self._extend(await_map_stage(nested.send, fn))
        return nested

    await_ = await_map

    def await_filter(self, fn: Callable[[Any, tuple], Awaitable[Any] | Any]) -> Stream:
        """Await fn(result, args); later stages run only if it resolves truthy."""
        nested = self._nested()
        self._extend(await_filter_stage(nested.send, fn))
        return nested

    # --- State ---

    @property
    def closed(self) -> bool:
        return self._subscription.closed

    @property
    def stages(self) -> tuple[Stage, ...]:
        return tuple(self._stages)

    # --- Internals ---

    def _extend(self, stage: Stage) -> Stream:
        self._stages.append(stage)
        self._compiled = None
        return self

    def _transform(self) -> Stage:
        if self._compiled is None:
            stages = tuple(self._stages)

            def transform(payload: Payload) -> Payload:
                for stage in stages:
                    payload = stage(payload)
                return payload

            self._compiled = transform
        return self._compiled

    def _nested(self) -> Stream:
        """A stream fed only through send(), sharing this stream's subscription."""
        return Stream(lambda _callback: self._subscription, on_error=self._on_error)

    def _sink(self, payload: Payload) -> Any:
        if not payload.has_error:
            return payload.result

        sink = self._on_error or get_error_sink()
        error = payload.error
        if isinstance(error, BaseException) or not inspect.isawaitable(error):
            notify(sink, error, payload)
            return None

        # Report a pending error value only once it settles.
        try:
            future = asyncio.ensure_future(error)
        except RuntimeError:
            notify(sink, error, payload)
            return None

        def _report(done: asyncio.Future) -> None:
            value, exc = settlement(done)
            notify(sink, exc if exc is not None else value, payload)

        future.add_done_callback(_report)
        return None

    def __repr__(self) -> str:
        state = "closed" if self.closed else "active"
        return f"Stream({len(self._stages)} stages, {state})"


def create_stream(attach: Attach, *, on_error: ErrorSink | None = None) -> Stream:
    """Attach to a source and return its Stream.

    Usage:
        def attach(callback):
            button.add_listener(callback)
            return lambda: button.remove_listener(callback)

        create_stream(attach).filter(lambda e, _: e.pressed).for_each(print)
    """
    return Stream(attach, on_error=on_error)
