"""eventpipe: composable event streams and promise-like timers for asyncio."""

from importlib.metadata import version as _version

__version__ = _version("eventpipe")

from eventpipe.payload import Payload
from eventpipe.errors import TimerRejected, default_error_sink, get_error_sink, set_error_sink
from eventpipe.stream import Stream, create_stream
from eventpipe.timer import Timer, create_timer, timeout
from eventpipe.debounce import debounce
from eventpipe.throttle import throttle
from eventpipe.listen import event_promise, interval, listen_to_emitter, listen_to_listener
from eventpipe.helpers import bool_, error, has_changed, log, not_, with_prev, with_prev_args, with_prev_result
# textual NOT auto-imported — opt-in only

__all__ = [
    "Payload",
    "Stream",
    "create_stream",
    "Timer",
    "TimerRejected",
    "timeout",
    "create_timer",
    "debounce",
    "throttle",
    "listen_to_listener",
    "listen_to_emitter",
    "interval",
    "event_promise",
    "set_error_sink",
    "get_error_sink",
    "default_error_sink",
    "with_prev",
    "with_prev_result",
    "with_prev_args",
    "has_changed",
    "not_",
    "bool_",
    "log",
    "error",
]
