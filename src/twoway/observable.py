"""Observable values — a mutable cell that pushes each new value to its observers.

subscribe() registers an observer and returns a Receipt; unsubscribe(receipt)
removes it. set() stores a value and notifies every observer synchronously,
on the calling thread. None means "no value": setting it never notifies.

Derived observables (map, filter, reduce, ...) hold their parent through a
retention closure stored under the internal subscription's receipt. The
parent only holds a weak reference back, so a chain stays alive exactly as
long as its leaf does, and a reclaimed child detaches itself from the parent.

Thread safety: the observer registry is guarded by a per-instance lock.
Notification iterates over a snapshot, outside the lock.
"""

from __future__ import annotations

import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Callable, Generic, Iterator, TypeVar

from twoway.dispatch import Dispatch, marshal
from twoway.receipt import PausableReceipt, Receipt

logger = logging.getLogger("twoway.observable")

T = TypeVar("T")
U = TypeVar("U")

Observer = Callable[["Observable[T]", T], None]


class Observable(Generic[T]):
    """A value cell with an observer registry and a pause switch."""

    def __init__(self, value: T | None = None) -> None:
        # Reentrant: releasing a child under the lock can run its finalizer,
        # which detaches from this same observable.
        self._lock = threading.RLock()
        self._value = value
        self._paused = False
        self._observers: dict[Receipt, Observer] = {}
        # Outgoing subscriptions: receipt -> closure holding the parent.
        self._bindings: dict[Receipt, Callable[[], object]] = {}

    # --- Value ---

    def get(self) -> T | None:
        """Current value, or None if no value has been set."""
        return self._value

    @property
    def has_value(self) -> bool:
        return self._value is not None

    def set(self, value: T | None) -> None:
        """Store value, then notify observers unless paused or value is None."""
        with self._lock:
            previous, self._value = self._value, value
            if value is None:
                return
            observers = list(self._observers.values())
        del previous
        self._notify(observers, value)

    def _notify(self, observers: list[Observer], value: T) -> None:
        for observer in observers:
            if self._paused:
                return
            observer(self, value)

    # --- Registry ---

    def subscribe(self, observer: Observer) -> Receipt:
        """Register observer(observable, value). No replay."""
        receipt = Receipt()
        with self._lock:
            self._observers[receipt] = observer
        return receipt

    def subscribe_pausable(self, observer: Observer) -> PausableReceipt:
        return self._pausable(self.subscribe(observer))

    def retain(self, holder: Callable[[], object], receipt: Receipt) -> None:
        """Keep holder alive for as long as the outgoing subscription exists."""
        with self._lock:
            self._bindings[receipt] = holder

    def unsubscribe(self, receipt: Receipt) -> None:
        """Remove receipt. Unknown receipts are logged and ignored."""
        with self._lock:
            observer = self._observers.pop(receipt, None)
            holder = self._bindings.pop(receipt, None)
        if observer is None and holder is None:
            logger.warning("Attempted to unsubscribe with an unknown receipt %r", receipt)

    def _detach(self, receipt: Receipt) -> None:
        with self._lock:
            observer = self._observers.pop(receipt, None)
        # Dropped outside the lock; it may own the last reference to a sibling child.
        del observer

    @property
    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def _pausable(self, receipt: Receipt) -> PausableReceipt:
        return PausableReceipt(receipt, self.unsubscribe, self.pause, self.resume)

    # --- Pause ---

    def pause(self) -> None:
        """Suppress notification. Values set while paused are not replayed."""
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    @property
    def is_paused(self) -> bool:
        return self._paused

    @contextmanager
    def paused(self) -> Iterator[None]:
        """Suppress notification for the duration of the block."""
        self.pause()
        try:
            yield
        finally:
            self.resume()

    # --- Value-only bindings ---

    def bind(self, fn: Callable[[T], None], *, replay: bool = True) -> Receipt:
        """Subscribe with a value-only callback.

        With replay, fn is called right away if a value is present.

        Usage:
            name = Observable("Alice")
            name.bind(print)       # prints "Alice"
            name.set("Bob")        # prints "Bob"
        """
        receipt = self.subscribe(lambda _observable, value: fn(value))
        if replay:
            current = self._value
            if current is not None:
                fn(current)
        return receipt

    def bind_pausable(self, fn: Callable[[T], None], *, replay: bool = True) -> PausableReceipt:
        return self._pausable(self.bind(fn, replay=replay))

    def bind_ui(
        self,
        fn: Callable[[T], None],
        *,
        replay: bool = True,
        dispatch: Dispatch | None = None,
    ) -> Receipt:
        """bind() with every call, replay included, marshaled through dispatch.

        Defaults to the dispatcher given to set_ui_dispatcher().
        """
        return self.bind(marshal(fn, dispatch), replay=replay)

    def bind_pausable_ui(
        self,
        fn: Callable[[T], None],
        *,
        replay: bool = True,
        dispatch: Dispatch | None = None,
    ) -> PausableReceipt:
        return self._pausable(self.bind_ui(fn, replay=replay, dispatch=dispatch))

    # --- Combinators ---

    def map(self, fn: Callable[[T], U], *, replay: bool = True) -> Observable[U]:
        """Child holds fn(value) for every value this observable emits."""
        return derive(self, lambda child, value: child.set(fn(value)), replay)

    def filter(self, predicate: Callable[[T], bool], *, replay: bool = True) -> Observable[T]:
        """Child only receives values where predicate holds."""

        def _on_value(child: Observable[T], value: T) -> None:
            if predicate(value):
                child.set(value)

        return derive(self, _on_value, replay)

    def compact_map(self, fn: Callable[[T], U | None], *, replay: bool = True) -> Observable[U]:
        """Like map, but a None result is dropped."""

        def _on_value(child: Observable[U], value: T) -> None:
            mapped = fn(value)
            if mapped is not None:
                child.set(mapped)

        return derive(self, _on_value, replay)

    def reduce(
        self,
        initial: U,
        reducer: Callable[[U, T], U],
        *,
        replay: bool = True,
    ) -> Observable[U]:
        """Left fold: child = reducer(child value or initial, value).

        Usage:
            letters = Observable()
            word = letters.reduce("", lambda acc, c: acc + c)
            letters.set("f"); letters.set("o")
            word.get()  # "fo"
        """

        def _on_value(child: Observable[U], value: T) -> None:
            current = child.get()
            child.set(reducer(initial if current is None else current, value))

        return derive(self, _on_value, replay)

    def distinct(self, *, replay: bool = True) -> Observable[T]:
        """Drop values equal to the child's current value."""

        def _on_value(child: Observable[T], value: T) -> None:
            if value != child.get():
                child.set(value)

        return derive(self, _on_value, replay)

    def debug(self, message: str, *, replay: bool = True) -> Observable[T]:
        """Pass-through that logs each value at DEBUG level."""

        def _log(value: T) -> T:
            logger.debug("%s (Current value: %r)", message, value)
            return value

        return self.map(_log, replay=replay)

    def __repr__(self) -> str:
        if self._value is None:
            return "Observable(<no value>)"
        return f"Observable({self._value!r})"


# ─── Derivation plumbing ─────────────────────────────────────────────────────


def link(child: Observable, parent: Observable, receipt: Receipt) -> None:
    """Make child own parent for the lifetime of the subscription `receipt`.

    The child keeps a strong reference to parent; when the child is
    reclaimed, the internal subscription is removed from parent.
    """
    child.retain(lambda: parent, receipt)
    finalizer = weakref.finalize(child, _detach_from, weakref.ref(parent), receipt)
    finalizer.atexit = False


def _detach_from(parent_ref: weakref.ref, receipt: Receipt) -> None:
    parent = parent_ref()
    if parent is not None:
        logger.debug("Derived observable reclaimed, detaching %r", receipt)
        parent._detach(receipt)


def derive(
    parent: Observable[T],
    on_value: Callable[[Observable[U], T], None],
    replay: bool,
) -> Observable[U]:
    """Build a child wired to parent. on_value(child, value) updates the child."""
    child: Observable[U] = Observable()
    child_ref = weakref.ref(child)

    def _forward(_source: Observable[T], value: T) -> None:
        target = child_ref()
        if target is not None:
            on_value(target, value)

    receipt = parent.subscribe(_forward)
    link(child, parent, receipt)
    if replay:
        current = parent.get()
        if current is not None:
            on_value(child, current)
    return child
