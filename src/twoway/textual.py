"""Textual integration for twoway. Opt-in — import it explicitly.

Bindings made here deliver on the app's message loop via app.call_later,
which may be called from any thread and does not wait for the callback.
Delivery is skipped while the app is paused or not running, and NoMatches
from widget queries is swallowed. Other exceptions propagate.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, TypeVar

from textual.css.query import NoMatches

from twoway.dispatch import Dispatch
from twoway.observable import Observable
from twoway.receipt import PausableReceipt, Receipt

T = TypeVar("T")

# Keyed by id(app) so multiple apps work in tests. id present <-> inside pause().
_paused_apps: set[int] = set()


@contextmanager
def pause(app) -> Iterator[None]:
    """Suspend guarded bindings during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def app_dispatcher(app) -> Dispatch:
    """Dispatcher that runs callbacks on the app's message loop.

    Usage:
        twoway.set_ui_dispatcher(app_dispatcher(app))
    """
    return app.call_later


def _guarded(app, fn: Callable[[T], None]) -> Callable[[T], None]:
    def _safe(value: T) -> None:
        if not is_safe(app):
            return
        try:
            fn(value)
        except NoMatches:
            pass

    return _safe


def bind(app, observable: Observable[T], fn: Callable[[T], None], *, replay: bool = True) -> Receipt:
    """Observable.bind_ui() that safely bridges to Textual widgets."""
    return observable.bind_ui(_guarded(app, fn), replay=replay, dispatch=app_dispatcher(app))


def bind_pausable(
    app, observable: Observable[T], fn: Callable[[T], None], *, replay: bool = True
) -> PausableReceipt:
    return observable.bind_pausable_ui(
        _guarded(app, fn), replay=replay, dispatch=app_dispatcher(app)
    )
