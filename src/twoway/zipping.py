"""zip() — join 2 to 5 observables into one observable of tuples.

Each slot holds the latest value of its source, or None until that source
emits. Any source emitting republishes the whole tuple. Slot updates are
serialized by a lock owned by the zip instance, so updates arriving from
different threads never overwrite each other.
"""

from __future__ import annotations

import threading
import weakref
from typing import Any, TypeVar, overload

from twoway.observable import Observable, link

A = TypeVar("A")
B = TypeVar("B")
C = TypeVar("C")
D = TypeVar("D")
E = TypeVar("E")

MIN_SOURCES = 2
MAX_SOURCES = 5


@overload
def zip(
    a: Observable[A], b: Observable[B], /, *, replay: bool = ...
) -> Observable[tuple[A | None, B | None]]: ...


@overload
def zip(
    a: Observable[A], b: Observable[B], c: Observable[C], /, *, replay: bool = ...
) -> Observable[tuple[A | None, B | None, C | None]]: ...


@overload
def zip(
    a: Observable[A],
    b: Observable[B],
    c: Observable[C],
    d: Observable[D],
    /,
    *,
    replay: bool = ...,
) -> Observable[tuple[A | None, B | None, C | None, D | None]]: ...


@overload
def zip(
    a: Observable[A],
    b: Observable[B],
    c: Observable[C],
    d: Observable[D],
    e: Observable[E],
    /,
    *,
    replay: bool = ...,
) -> Observable[tuple[A | None, B | None, C | None, D | None, E | None]]: ...


def zip(*sources: Observable[Any], replay: bool = True) -> Observable[tuple[Any, ...]]:
    """Combine sources into an observable of value tuples.

    A source that is no longer referenced elsewhere stays alive through the
    zipped child; its slot keeps the last value it emitted.
    Observers of the zipped child run while the zip lock is held, so a slow
    observer delays updates arriving from the other sources.

    Usage:
        name, age = Observable(), Observable()
        both = zip(name, age)
        name.set("Ada")   # both -> ("Ada", None)
        age.set(36)       # both -> ("Ada", 36)
    """
    if not MIN_SOURCES <= len(sources) <= MAX_SOURCES:
        raise TypeError(
            f"zip() takes {MIN_SOURCES} to {MAX_SOURCES} observables ({len(sources)} given)"
        )

    child: Observable[tuple[Any, ...]] = Observable()
    child_ref = weakref.ref(child)
    lock = threading.RLock()
    width = len(sources)

    def _slot_writer(index: int):
        def _write(_source: Observable[Any], value: Any) -> None:
            target = child_ref()
            if target is None:
                return
            with lock:
                slots = list(target.get() or (None,) * width)
                slots[index] = value
                target.set(tuple(slots))

        return _write

    for index, source in enumerate(sources):
        receipt = source.subscribe(_slot_writer(index))
        link(child, source, receipt)

    if replay:
        with lock:
            child.set(tuple(source.get() for source in sources))
    return child
