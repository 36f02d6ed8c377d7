"""Stage wrappers — pure Payload -> Payload transforms.

Each factory takes the user's callable and returns a Stage implementing one
propagation rule:

    stage        error present      use=False        normal
    map          pass through       pass through     result = f(result, args)
    for_each     pass through       pass through     f(result, args), unchanged
    filter       use = False        pass through     use = bool(p(result, args))
    catch        result = h(error)  pass through     pass through
    clear        as normal          as normal        unsubscribe() if p(result, args)

An Exception raised by the user's callable turns the payload into an errored
one (payload.failed), which map/for_each/filter skip until a catch stage.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable

from eventpipe._futures import settlement
from eventpipe.payload import Payload

Stage = Callable[[Payload], Payload]
Send = Callable[[Payload], Any]


def map_stage(fn: Callable[[Any, tuple], Any]) -> Stage:
    def stage(payload: Payload) -> Payload:
        if payload.has_error or not payload.use:
            return payload
        try:
            return payload._replace(result=fn(payload.result, payload.args))
        except Exception as exc:
            return payload.failed(exc)

    return stage


def for_each_stage(fn: Callable[[Any, tuple], Any]) -> Stage:
    def stage(payload: Payload) -> Payload:
        if payload.has_error or not payload.use:
            return payload
        try:
            fn(payload.result, payload.args)
        except Exception as exc:
            return payload.failed(exc)
        return payload

    return stage


def filter_stage(predicate: Callable[[Any, tuple], Any]) -> Stage:
    def stage(payload: Payload) -> Payload:
        if payload.has_error:
            return payload._replace(use=False)
        if not payload.use:
            return payload
        try:
            return payload._replace(use=bool(predicate(payload.result, payload.args)))
        except Exception as exc:
            return payload.failed(exc)

    return stage


def catch_stage(handler: Callable[[Any, tuple], Any]) -> Stage:
    def stage(payload: Payload) -> Payload:
        if not payload.has_error:
            return payload
        try:
            return Payload(
                result=handler(payload.error, payload.args),
                args=payload.args,
                use=payload.use,
            )
        except Exception as exc:
            return payload.failed(exc)

    return stage


def clear_stage(unsubscribe: Callable[[], Any], predicate: Callable[[Any, tuple], Any]) -> Stage:
    """Unsubscribe from the source once predicate(result, args) is true.

    The predicate is evaluated for every payload, errored or not. The
    payload itself always continues unchanged.
    """

    def stage(payload: Payload) -> Payload:
        try:
            if predicate(payload.result, payload.args):
                unsubscribe()
        except Exception as exc:
            return payload.failed(exc)
        return payload

    return stage


# ─── Async stages ────────────────────────────────────────────────────────────


async def _resolve(payload: Payload, fn: Callable[[Any, tuple], Any]) -> tuple[Any, Any]:
    """Await an awaitable result, then fn(result, args) and its outcome.

    Returns (result, outcome) with both settled.
    """
    result = payload.result
    if inspect.isawaitable(result):
        result = await result
    outcome = fn(result, payload.args)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return result, outcome


def _async_stage(send: Send, fn: Callable[[Any, tuple], Awaitable[Any] | Any], on_settled: Callable[[Payload, Any], Payload]) -> Stage:
    def stage(payload: Payload) -> Payload:
        if payload.has_error or not payload.use:
            return Payload(result=send(payload), args=payload.args, use=payload.use)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            return payload.failed(exc)

        def _deliver(future: asyncio.Future) -> None:
            settled, exc = settlement(future)
            if exc is not None:
                send(payload.failed(exc))
                return
            result, outcome = settled
            send(on_settled(payload._replace(result=result), outcome))

        future = loop.create_task(_resolve(payload, fn))
        future.add_done_callback(_deliver)
        return payload._replace(result=future)

    return stage


def await_map_stage(send: Send, fn: Callable[[Any, tuple], Awaitable[Any] | Any]) -> Stage:
    """Resolve fn(result, args) and send the value on as the new result."""
    return _async_stage(send, fn, lambda payload, value: payload._replace(result=value))


def await_filter_stage(send: Send, fn: Callable[[Any, tuple], Awaitable[Any] | Any]) -> Stage:
    """Resolve fn(result, args) and send the payload on with use=bool(value).

    The original result is kept.
    """
    return _async_stage(send, fn, lambda payload, value: payload._replace(use=bool(value)))
