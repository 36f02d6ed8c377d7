"""Textual integration for eventpipe. Opt-in — requires textual.

Textual's own timers become stream sources, and stage callables that touch
widgets can be guarded against a widget tree that is not queryable yet.
Textual coupling stays in this module; the core streams know nothing about it.
"""

from contextlib import contextmanager

from textual.css.query import NoMatches

from eventpipe.stream import Stream

# Module-owned pause state, keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Skip guarded stage callables during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def guard(app, fn):
    """Wrap a stage callable so it only runs when the app is safe.

    NoMatches from widget queries is swallowed and the value passes through
    unchanged; any other exception becomes the payload's error as usual.

    Usage:
        stream.for_each(guard(app, lambda n, _: app.query_one("#count").update(str(n))))
    """

    def _guarded(value, args):
        if not is_safe(app):
            return value
        try:
            return fn(value, args)
        except NoMatches:
            return value

    return _guarded


def set_interval(widget, seconds: float, *, on_error=None) -> Stream:
    """Stream of tick counts driven by widget.set_interval().

    clear() stops the underlying Textual timer.
    """

    def attach(callback):
        count = 0

        def tick():
            nonlocal count
            current = count
            count += 1
            callback(current)

        timer = widget.set_interval(seconds, tick)
        return timer.stop

    return Stream(attach, on_error=on_error)
