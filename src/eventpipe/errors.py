"""Error sink configuration and error types.

Uncaught stream errors never propagate into the source's callback. They are
handed to an error sink instead. The process-wide default logs them; streams
can override it with on_error=.

Call set_error_sink() once at startup to route uncaught errors elsewhere:
    eventpipe.set_error_sink(lambda error, payload: sentry_sdk.capture_exception(error))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from eventpipe.payload import Payload

logger = logging.getLogger("eventpipe.stream")

ErrorSink = Callable[[Any, "Payload"], None]


class TimerRejected(Exception):
    """A timer was rejected with a value that is not an exception."""

    def __init__(self, value: Any) -> None:
        super().__init__(value)
        self.value = value


def default_error_sink(error: Any, payload: Payload) -> None:
    """Log an uncaught error with its traceback when it has one."""
    if isinstance(error, BaseException):
        logger.error(
            "Uncaught error in event stream (args=%r)",
            payload.args,
            exc_info=(type(error), error, error.__traceback__),
        )
    else:
        logger.error("Uncaught error in event stream: %r (args=%r)", error, payload.args)


_error_sink: ErrorSink = default_error_sink


def set_error_sink(sink: ErrorSink | None) -> None:
    """Set the default sink for streams created without on_error.

    Passing None restores the logging sink.
    """
    global _error_sink
    _error_sink = sink if sink is not None else default_error_sink


def get_error_sink() -> ErrorSink:
    return _error_sink


def notify(sink: ErrorSink, error: Any, payload: Payload) -> None:
    """Call sink, logging (not raising) anything it throws."""
    try:
        sink(error, payload)
    except Exception:
        logger.exception("Error sink %r failed", sink)
