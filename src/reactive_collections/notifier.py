"""Notifying mutation wrapper — the heart of reactive_collections.

Every mutation of a live collection runs through a MutationNotifier. When
the outermost operation exits, successfully or not, the notifier takes a
fresh snapshot and commits it to the StateStream. Exactly one commit
happens per logical operation, however many underlying mutations it made.

Batching: run(), batch(), batch_async() and batching() all share one depth
counter per notifier. Nested scopes are collapsed; only the outermost exit
commits. There is no rollback. A failed operation leaves whatever it had
already applied in place, and that partial state is what gets committed.
"""

from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from typing import Awaitable, Callable, Concatenate, Generic, Iterator, ParamSpec, TypeVar

from reactive_collections.stream import StateStream

C = TypeVar("C")
S = TypeVar("S")
R = TypeVar("R")
P = ParamSpec("P")

logger = logging.getLogger("reactive_collections.notifier")


class MutationNotifier(Generic[C, S]):
    """Runs mutations against a live collection and commits one snapshot per operation."""

    __slots__ = ("_live", "_snapshot", "_stream", "_depth")

    def __init__(self, live: C, snapshot: Callable[[C], S]) -> None:
        self._live = live
        self._snapshot = snapshot
        self._stream: StateStream[S] = StateStream(snapshot(live))
        self._depth = 0

    @property
    def stream(self) -> StateStream[S]:
        return self._stream

    @property
    def depth(self) -> int:
        """Number of open operations. Zero when idle."""
        return self._depth

    def _begin(self) -> None:
        self._depth += 1

    def _end(self) -> None:
        self._depth -= 1
        if self._depth == 0:
            self._stream._replace(self._snapshot(self._live))

    def run(self, op: Callable[Concatenate[C, P], R], /, *args: P.args, **kwargs: P.kwargs) -> R:
        """Apply op(live, *args, **kwargs) and commit once.

        The commit happens even if op raises; the error then propagates.
        """
        self._begin()
        try:
            return op(self._live, *args, **kwargs)
        except Exception as exc:
            logger.debug("%s raised %s; committing partial state", _name(op), type(exc).__name__)
            raise
        finally:
            self._end()

    def batch(self, fn: Callable[[C], R]) -> R:
        """Call fn(live) with notifications deferred to the end.

        Usage:
            notifier.batch(lambda items: (items.append(1), items.append(2)))
            # subscribers see one snapshot holding both appends
        """
        return self.run(fn)

    async def batch_async(self, fn: Callable[[C], Awaitable[R]]) -> R:
        """Await fn(live) with notifications deferred to the end.

        Suspension inside fn does not release the batch. Cancellation takes
        the failure path: the partial state is committed, then
        CancelledError propagates.
        """
        self._begin()
        try:
            return await fn(self._live)
        except BaseException as exc:
            logger.debug("%s raised %s; committing partial state", _name(fn), type(exc).__name__)
            raise
        finally:
            self._end()

    @contextmanager
    def batching(self) -> Iterator[C]:
        """Context manager form of batch(); yields the live collection.

        Usage:
            with notifier.batching() as items:
                items.append(1)
                items.append(2)
            # one commit here
        """
        self._begin()
        try:
            yield self._live
        finally:
            self._end()


def notifying(method: Callable[..., R]) -> Callable[..., R]:
    """Decorator: route a facade method through its notifier.

    The decorated method receives the live collection in place of self,
    so its body reads like the plain builtin call it wraps.

    Usage:
        class ReactiveList:
            @notifying
            def append(items, value):
                items.append(value)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        return self._notifier.run(method, *args, **kwargs)

    return wrapper


def _name(fn: Callable) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)
