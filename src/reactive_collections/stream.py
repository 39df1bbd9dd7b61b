"""Latest-value streams with operator chaining.

A StateStream always holds a current value. Subscribing replays that value
immediately, then pushes every committed value in commit order. Operators
(map, distinct_until_changed) return cold DerivedStreams: each subscription
builds its own chain back to the source, so per-subscriber state such as
the last emitted value lives and dies with that subscription.

Subscriber exceptions never abort a fan-out. They go to the error handler
installed with set_error_handler(); the default logs them.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")

Disposer = Callable[[], None]
ErrorHandler = Callable[[BaseException, object], None]

logger = logging.getLogger("reactive_collections.stream")

# Marks "nothing emitted yet". None is a legitimate emitted value.
_UNSET = object()


# ─── Error handling ──────────────────────────────────────────────────────────
def _log_subscriber_error(exc: BaseException, value: object) -> None:
    logger.exception("Subscriber raised while receiving %r", value, exc_info=exc)


_error_handler: ErrorHandler = _log_subscriber_error


def set_error_handler(handler: ErrorHandler | None) -> None:
    """Set the global handler for exceptions raised by subscriber callbacks.

    The handler is called as handler(exc, value) and the fan-out continues
    with the next subscriber. Pass None to restore the default, which logs
    the failure on the "reactive_collections.stream" logger.
    """
    global _error_handler
    _error_handler = handler if handler is not None else _log_subscriber_error


def _deliver(callback: Callable[[T], None], value: T) -> None:
    try:
        callback(value)
    except Exception as exc:
        _error_handler(exc, value)


class _Operators(Generic[T]):
    """Operator methods shared by StateStream and DerivedStream."""

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        raise NotImplementedError

    def get(self) -> T:
        raise NotImplementedError

    @property
    def value(self) -> T:
        return self.get()

    def map(self, fn: Callable[[T], U]) -> DerivedStream[U]:
        """Transform every value through fn."""

        def _attach(emit: Callable[[U], None]) -> Disposer:
            return self.subscribe(lambda v: emit(fn(v)))

        return DerivedStream(_attach, lambda: fn(self.get()))

    def distinct_until_changed(self) -> DerivedStream[T]:
        """Drop values equal to the previous one emitted to the same subscriber."""

        def _attach(emit: Callable[[T], None]) -> Disposer:
            last = [_UNSET]

            def _on_value(v: T) -> None:
                if last[0] is not _UNSET and (last[0] is v or last[0] == v):
                    return
                last[0] = v
                emit(v)

            return self.subscribe(_on_value)

        return DerivedStream(_attach, self.get)


class StateStream(_Operators[T]):
    """A stream that always holds a current value and replays it to new subscribers.

    Every commit gets a version number. A subscriber only receives queued
    commits newer than the one it was replayed, so subscribing in the
    middle of a fan-out never delivers the same commit twice.
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._version = 0
        self._subscribers: list[tuple[Callable[[T], None], int]] = []
        self._lock = threading.RLock()
        self._emitting = False
        self._queue: deque = deque()

    def get(self) -> T:
        """Current value. Never blocks."""
        return self._value

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        """Register a callback and replay the current value to it.

        The replay happens inside the critical section, so no commit can
        reach the callback ahead of it. Returns a function that removes it.
        """
        with self._lock:
            entry = (callback, self._version)
            self._subscribers.append(entry)
            _deliver(callback, self._value)

        def _unsubscribe() -> None:
            with self._lock:
                try:
                    self._subscribers.remove(entry)
                except ValueError:
                    pass  # already removed

        return _unsubscribe

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def _replace(self, value: T) -> None:
        """Commit a new value and push it to every current subscriber.

        Replaces made from inside a subscriber callback are queued behind
        the fan-out in progress, so fan-outs never interleave.
        """
        with self._lock:
            self._version += 1
            self._value = value
            self._queue.append((self._version, value))
            if self._emitting:
                return
            self._emitting = True
            try:
                while self._queue:
                    version, pending = self._queue.popleft()
                    for cb, replayed in list(self._subscribers):
                        if replayed < version:
                            _deliver(cb, pending)
            finally:
                self._emitting = False
                self._queue.clear()

    def __repr__(self) -> str:
        return f"StateStream({self._value!r})"


class DerivedStream(_Operators[T]):
    """A cold stream derived from another stream.

    Nothing runs until subscribe(); each subscriber gets an independent
    chain, so operator state is never shared between subscribers.
    """

    def __init__(
        self,
        attach: Callable[[Callable[[T], None]], Disposer],
        current: Callable[[], T],
    ) -> None:
        self._attach = attach
        self._current = current

    def get(self) -> T:
        """The value a new subscriber would receive first."""
        return self._current()

    def subscribe(self, callback: Callable[[T], None]) -> Disposer:
        """Register a callback. Returns a function that tears down its chain."""
        disposer = self._attach(callback)
        disposed = [False]

        def _unsubscribe() -> None:
            if not disposed[0]:
                disposed[0] = True
                disposer()

        return _unsubscribe

    def __repr__(self) -> str:
        return f"DerivedStream({self._current()!r})"
