"""Reactive collections — list, set and dict that publish snapshots.

Each facade owns one live builtin collection and one MutationNotifier.
Every mutating method runs through the notifier, so subscribers to
as_stream() receive exactly one immutable snapshot per call:

    list -> tuple
    set  -> frozenset
    dict -> read-only mappingproxy over a fresh dict

Read methods pass straight through to the live collection and never
notify. Mutating methods return whatever the builtin returns and raise
whatever it raises, after the notification has gone out.
"""

from __future__ import annotations

from contextlib import contextmanager
from types import MappingProxyType
from typing import (
    Awaitable,
    Callable,
    Generic,
    Iterable,
    Iterator,
    Mapping,
    TypeVar,
)

from reactive_collections.notifier import MutationNotifier, notifying
from reactive_collections.stream import StateStream

T = TypeVar("T")
KT = TypeVar("KT")
VT = TypeVar("VT")
R = TypeVar("R")


class _Facade:
    """Methods every facade shares. Subclasses set _notifier and _live."""

    __slots__ = ()

    def as_stream(self) -> StateStream:
        """The latest-value stream of snapshots."""
        return self._notifier.stream

    @property
    def snapshot(self):
        """The most recently committed snapshot."""
        return self._notifier.stream.get()

    def batch_update(self, fn: Callable[..., R]) -> R:
        """Run fn(live) and notify once when it returns or raises.

        Usage:
            fruits.batch_update(lambda items: (items.append("A"), items.append("B")))
        """
        return self._notifier.batch(fn)

    async def batch_update_async(self, fn: Callable[..., Awaitable[R]]) -> R:
        """Await fn(live) and notify once when it completes, fails or is cancelled."""
        return await self._notifier.batch_async(fn)

    @contextmanager
    def batching(self):
        """Context manager for batching mutations.

        Usage:
            with fruits.batching() as items:
                items.append("A")
                items.remove("B")
                # subscribers are notified here, once
        """
        with self._notifier.batching() as live:
            yield live

    def __eq__(self, other: object) -> bool:
        if isinstance(other, _Facade):
            return self._live == other._live
        return self._live == other

    __hash__ = None  # mutable content, like the builtins

    def __len__(self) -> int:
        return len(self._live)

    def __iter__(self) -> Iterator:
        return iter(self._live)

    def __contains__(self, item: object) -> bool:
        return item in self._live

    def __bool__(self) -> bool:
        return bool(self._live)

    def __str__(self) -> str:
        return str(self._live)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._live!r})"


# ─── List ────────────────────────────────────────────────────────────────────


class ReactiveList(_Facade, Generic[T]):
    """A list that publishes a tuple snapshot after every mutation."""

    __slots__ = ("_live", "_notifier")

    def __init__(self, items: Iterable[T] | None = None) -> None:
        self._live: list[T] = list(items) if items is not None else []
        self._notifier: MutationNotifier[list[T], tuple[T, ...]] = MutationNotifier(self._live, tuple)

    @classmethod
    def wrap(cls, items: list[T]) -> ReactiveList[T]:
        """Take ownership of an existing list without copying it."""
        self = cls.__new__(cls)
        self._live = items
        self._notifier = MutationNotifier(items, tuple)
        return self

    # --- Read operations (pass through) ---

    def __getitem__(self, index):
        return self._live[index]

    def __reversed__(self) -> Iterator[T]:
        return reversed(self._live)

    def index(self, value: T, *args) -> int:
        return self._live.index(value, *args)

    def count(self, value: T) -> int:
        return self._live.count(value)

    def copy(self) -> list[T]:
        return self._live.copy()

    # --- Write operations (notify) ---

    @notifying
    def append(items, value: T) -> None:
        items.append(value)

    @notifying
    def extend(items, values: Iterable[T]) -> None:
        items.extend(values)

    @notifying
    def insert(items, index: int, value: T) -> None:
        items.insert(index, value)

    @notifying
    def insert_all(items, index: int, values: Iterable[T]) -> bool:
        """Insert values at index, keeping their order. True if anything was inserted.

        Raises IndexError for an index outside [0, len], unlike insert().
        """
        if not 0 <= index <= len(items):
            raise IndexError(f"insert index {index} out of range for length {len(items)}")
        values = list(values)
        items[index:index] = values
        return bool(values)

    @notifying
    def __setitem__(items, index, value) -> None:
        items[index] = value

    @notifying
    def set(items, index: int, value: T) -> T:
        """Replace the element at index and return the one it replaced."""
        old = items[index]
        items[index] = value
        return old

    @notifying
    def __delitem__(items, index) -> None:
        del items[index]

    @notifying
    def pop(items, index: int = -1) -> T:
        return items.pop(index)

    @notifying
    def remove(items, value: T) -> None:
        items.remove(value)

    @notifying
    def remove_all(items, values: Iterable[T]) -> bool:
        """Remove every occurrence of every element in values. True if the list changed."""
        doomed = list(values)
        kept = [item for item in items if item not in doomed]
        changed = len(kept) != len(items)
        items[:] = kept
        return changed

    @notifying
    def retain_all(items, values: Iterable[T]) -> bool:
        """Keep only elements found in values. True if the list changed."""
        wanted = list(values)
        kept = [item for item in items if item in wanted]
        changed = len(kept) != len(items)
        items[:] = kept
        return changed

    @notifying
    def clear(items) -> None:
        items.clear()

    @notifying
    def sort(items, *, key=None, reverse: bool = False) -> None:
        items.sort(key=key, reverse=reverse)

    @notifying
    def reverse(items) -> None:
        items.reverse()

    def __iadd__(self, values: Iterable[T]) -> ReactiveList[T]:
        self.extend(values)
        return self

    def __imul__(self, n: int) -> ReactiveList[T]:
        self._notifier.run(list.__imul__, n)
        return self


# ─── Set ─────────────────────────────────────────────────────────────────────


class ReactiveSet(_Facade, Generic[T]):
    """A set that publishes a frozenset snapshot after every mutation."""

    __slots__ = ("_live", "_notifier")

    def __init__(self, items: Iterable[T] | None = None) -> None:
        self._live: set[T] = set(items) if items is not None else set()
        self._notifier: MutationNotifier[set[T], frozenset[T]] = MutationNotifier(self._live, frozenset)

    @classmethod
    def wrap(cls, items: set[T]) -> ReactiveSet[T]:
        """Take ownership of an existing set without copying it."""
        self = cls.__new__(cls)
        self._live = items
        self._notifier = MutationNotifier(items, frozenset)
        return self

    # --- Read operations (pass through) ---

    def isdisjoint(self, other: Iterable[T]) -> bool:
        return self._live.isdisjoint(other)

    def issubset(self, other: Iterable[T]) -> bool:
        return self._live.issubset(other)

    def issuperset(self, other: Iterable[T]) -> bool:
        return self._live.issuperset(other)

    def union(self, *others: Iterable[T]) -> set[T]:
        return self._live.union(*others)

    def intersection(self, *others: Iterable[T]) -> set[T]:
        return self._live.intersection(*others)

    def difference(self, *others: Iterable[T]) -> set[T]:
        return self._live.difference(*others)

    def symmetric_difference(self, other: Iterable[T]) -> set[T]:
        return self._live.symmetric_difference(other)

    def copy(self) -> set[T]:
        return self._live.copy()

    # --- Write operations (notify) ---

    @notifying
    def add(items, value: T) -> None:
        items.add(value)

    @notifying
    def discard(items, value: T) -> None:
        items.discard(value)

    @notifying
    def remove(items, value: T) -> None:
        items.remove(value)

    @notifying
    def pop(items) -> T:
        return items.pop()

    @notifying
    def clear(items) -> None:
        items.clear()

    @notifying
    def update(items, *others: Iterable[T]) -> None:
        items.update(*others)

    @notifying
    def difference_update(items, *others: Iterable[T]) -> None:
        items.difference_update(*others)

    @notifying
    def intersection_update(items, *others: Iterable[T]) -> None:
        items.intersection_update(*others)

    @notifying
    def symmetric_difference_update(items, other: Iterable[T]) -> None:
        items.symmetric_difference_update(other)

    @notifying
    def remove_all(items, values: Iterable[T]) -> bool:
        """Remove every element in values. True if the set changed."""
        before = len(items)
        items.difference_update(values)
        return len(items) != before

    @notifying
    def retain_all(items, values: Iterable[T]) -> bool:
        """Keep only elements found in values. True if the set changed."""
        before = len(items)
        items.intersection_update(values)
        return len(items) != before

    def __ior__(self, other: Iterable[T]) -> ReactiveSet[T]:
        self.update(other)
        return self

    def __iand__(self, other: Iterable[T]) -> ReactiveSet[T]:
        self.intersection_update(other)
        return self

    def __isub__(self, other: Iterable[T]) -> ReactiveSet[T]:
        self.difference_update(other)
        return self

    def __ixor__(self, other: Iterable[T]) -> ReactiveSet[T]:
        self.symmetric_difference_update(other)
        return self


# ─── Dict ────────────────────────────────────────────────────────────────────


def _freeze_dict(data: dict) -> Mapping:
    return MappingProxyType(dict(data))


class ReactiveDict(_Facade, Generic[KT, VT]):
    """A dict that publishes a read-only mapping snapshot after every mutation."""

    __slots__ = ("_live", "_notifier")

    def __init__(self, data: Mapping[KT, VT] | Iterable[tuple[KT, VT]] | None = None, **kwargs: VT) -> None:
        self._live: dict[KT, VT] = dict(data) if data is not None else {}
        self._live.update(kwargs)
        self._notifier: MutationNotifier[dict[KT, VT], Mapping[KT, VT]] = MutationNotifier(self._live, _freeze_dict)

    @classmethod
    def wrap(cls, data: dict[KT, VT]) -> ReactiveDict[KT, VT]:
        """Take ownership of an existing dict without copying it."""
        self = cls.__new__(cls)
        self._live = data
        self._notifier = MutationNotifier(data, _freeze_dict)
        return self

    # --- Read operations (pass through) ---

    def __getitem__(self, key: KT) -> VT:
        return self._live[key]

    def get(self, key: KT, default: VT | None = None) -> VT | None:
        return self._live.get(key, default)

    def keys(self):
        return self._live.keys()

    def values(self):
        return self._live.values()

    def items(self):
        return self._live.items()

    def copy(self) -> dict[KT, VT]:
        return self._live.copy()

    # --- Write operations (notify) ---

    @notifying
    def __setitem__(data, key: KT, value: VT) -> None:
        data[key] = value

    @notifying
    def put(data, key: KT, value: VT) -> VT | None:
        """Map key to value. Returns the previous value, or None if key was absent.

        Notifies even when the new value equals the old one.
        """
        previous = data.get(key)
        data[key] = value
        return previous

    @notifying
    def __delitem__(data, key: KT) -> None:
        del data[key]

    @notifying
    def pop(data, key: KT, *args) -> VT:
        return data.pop(key, *args)

    @notifying
    def popitem(data) -> tuple[KT, VT]:
        return data.popitem()

    @notifying
    def setdefault(data, key: KT, default: VT | None = None) -> VT:
        return data.setdefault(key, default)

    @notifying
    def update(data, other=(), /, **kwargs: VT) -> None:
        data.update(other, **kwargs)

    @notifying
    def clear(data) -> None:
        data.clear()

    def __ior__(self, other) -> ReactiveDict[KT, VT]:
        self.update(other)
        return self


# ─── Factories ───────────────────────────────────────────────────────────────


def reactive_list_of(*elements: T) -> ReactiveList[T]:
    """Create a ReactiveList holding elements, in order.

    Usage:
        todos = reactive_list_of("Buy groceries", "Walk the dog")
        todos.as_stream().subscribe(print)  # prints the tuple immediately
    """
    return ReactiveList(elements)


def reactive_set_of(*elements: T) -> ReactiveSet[T]:
    """Create a ReactiveSet holding elements."""
    return ReactiveSet(elements)


def reactive_dict_of(*pairs: tuple[KT, VT]) -> ReactiveDict[KT, VT]:
    """Create a ReactiveDict from (key, value) pairs. Later pairs win on duplicate keys."""
    return ReactiveDict(pairs)
