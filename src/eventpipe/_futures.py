"""Small asyncio.Future helpers shared by stages, streams and timers."""

from __future__ import annotations

import asyncio
from typing import Any


def settlement(future: asyncio.Future) -> tuple[Any, BaseException | None]:
    """(value, None) for a fulfilled future, (None, exc) otherwise."""
    if future.cancelled():
        return None, asyncio.CancelledError()
    exc = future.exception()
    if exc is not None:
        return None, exc
    return future.result(), None


def adopt(target: asyncio.Future, value: Any, exc: BaseException | None) -> None:
    """Settle target with a settlement() pair unless it is already done."""
    if target.done():
        return
    if exc is not None:
        target.set_exception(exc)
    else:
        target.set_result(value)
