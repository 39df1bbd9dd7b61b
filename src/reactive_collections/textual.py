"""Textual integration for reactive_collections. Opt-in — requires textual.

bind() is the only seam between snapshot streams and Textual widgets.
Core reactive_collections stays unaware of Textual.
"""

import threading
from collections import Counter
from contextlib import contextmanager, suppress

from textual.css.query import NoMatches

# Open pause() scopes per app, keyed by id(app). Nested pauses stack.
_pause_depth: Counter = Counter()


@contextmanager
def pause(app):
    """Hold back bound deliveries while widgets are being replaced.

    Nested pauses of the same app only lift when the outermost one exits.
    """
    key = id(app)
    _pause_depth[key] += 1
    try:
        yield
    finally:
        _pause_depth[key] -= 1
        if _pause_depth[key] <= 0:
            del _pause_depth[key]


def is_safe(app) -> bool:
    """True when app is running and not inside pause()."""
    return app.is_running and _pause_depth[id(app)] == 0


def bind(app, stream, effect):
    """Feed every value of stream to effect, but only while app can take it.

    Values that arrive while the app is paused or stopped are dropped.
    Values published from a worker thread are handed to the app thread via
    app.call_from_thread. A widget that is not mounted yet (NoMatches) is
    not an error. Returns the disposer.

    Usage:
        todos = reactive_list_of("a", "b")
        dispose = bind(app, todos.as_stream(), lambda items: app.query_one(TodoList).show(items))
    """
    app_thread = threading.get_ident()

    def _apply(value):
        with suppress(NoMatches):
            effect(value)

    def _on_value(value):
        if not is_safe(app):
            return
        if threading.get_ident() == app_thread:
            _apply(value)
        else:
            app.call_from_thread(_apply, value)

    return stream.subscribe(_on_value)
