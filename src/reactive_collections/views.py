"""Derived views — narrower streams over a reactive collection.

Each view maps every snapshot through a projection and drops values equal
to the last one its subscriber saw. Subscribing replays the current
projection first. Views never raise for out-of-range positions or missing
keys; they emit a default or an empty tuple instead.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

from reactive_collections.observable import ReactiveDict, ReactiveList
from reactive_collections.stream import DerivedStream

T = TypeVar("T")
KT = TypeVar("KT")
VT = TypeVar("VT")


def item_view(items: ReactiveList[T], index: int, default: T | None = None) -> DerivedStream[T | None]:
    """Stream the element at index, or default while index is out of range.

    Negative indices are always out of range.

    Usage:
        fruits = reactive_list_of("Apple", "Banana", "Cherry")
        item_view(fruits, 1).subscribe(print)  # Banana
        fruits[1] = "Blueberry"                # Blueberry
        fruits.append("Dragonfruit")           # (nothing)
        fruits.pop(0)                          # Cherry
        fruits.clear()                         # None
    """

    def _at(snapshot: Sequence[T]) -> T | None:
        if 0 <= index < len(snapshot):
            return snapshot[index]
        return default

    return items.as_stream().map(_at).distinct_until_changed()


def value_view(data: ReactiveDict[KT, VT], key: KT, default: VT | None = None) -> DerivedStream[VT | None]:
    """Stream the value mapped to key, or default while key is absent."""
    return data.as_stream().map(lambda snapshot: snapshot.get(key, default)).distinct_until_changed()


def slice_view(
    items: ReactiveList[T],
    start: int,
    stop: int,
    *,
    strict: bool = True,
) -> DerivedStream[tuple[T, ...]]:
    """Stream the slice [start, stop) of every snapshot as a tuple.

    strict=True: emits () whenever 0 <= start <= stop <= len fails.
    strict=False: clamps both bounds into [0, len] first; emits () if
    start ends up past stop.

    Usage:
        numbers = reactive_list_of(0, 1, 2, 3, 4, 5)
        slice_view(numbers, 2, 5).subscribe(print)  # (2, 3, 4)
        numbers.pop(0)                              # (3, 4, 5)
        numbers.retain_all([2, 3, 4])               # ()
    """

    def _slice(snapshot: tuple[T, ...]) -> tuple[T, ...]:
        size = len(snapshot)
        if strict:
            lo, hi = start, stop
        else:
            lo, hi = min(max(start, 0), size), min(max(stop, 0), size)
        if 0 <= lo <= hi <= size:
            return tuple(snapshot[lo:hi])
        return ()

    return items.as_stream().map(_slice).distinct_until_changed()
