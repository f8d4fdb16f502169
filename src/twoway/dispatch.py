"""Thread-affine delivery — run observer callbacks on a chosen execution context.

A dispatcher is any callable that accepts a zero-argument function and
arranges for it to run somewhere else, without waiting for it:

    executor.submit                 # concurrent.futures
    loop.call_soon_threadsafe       # asyncio
    app.call_later                  # Textual (see twoway.textual)

Call set_ui_dispatcher() once at startup to name the UI context. After that,
Observable.bind_ui() marshals every delivery there. Calls are fire-and-forget:
Observable.set() never blocks on a marshaled observer.
"""

from __future__ import annotations

import asyncio
import functools
from concurrent.futures import Executor
from typing import TYPE_CHECKING, Callable, TypeVar

if TYPE_CHECKING:
    from twoway.observable import Observable
    from twoway.receipt import Receipt

T = TypeVar("T")

Dispatch = Callable[[Callable[[], None]], object]

# ─── UI dispatcher ───────────────────────────────────────────────────────────
_ui_dispatch: Dispatch | None = None


def set_ui_dispatcher(dispatch: Dispatch | None) -> None:
    """Set the process-wide dispatcher used for UI delivery.

    Call once from the UI thread:
        twoway.set_ui_dispatcher(app_dispatcher(app))

    Pass None to clear it.
    """
    global _ui_dispatch
    _ui_dispatch = dispatch


def get_ui_dispatcher() -> Dispatch:
    if _ui_dispatch is None:
        raise RuntimeError("No UI dispatcher configured; call set_ui_dispatcher() first")
    return _ui_dispatch


def marshal(fn: Callable[[T], None], dispatch: Dispatch | None = None) -> Callable[[T], None]:
    """Wrap fn so each call is submitted to dispatch instead of run inline.

    The dispatcher is resolved now, not per call, so a later
    set_ui_dispatcher() does not reroute existing bindings.
    """
    submit = dispatch if dispatch is not None else get_ui_dispatcher()

    def _marshaled(value: T) -> None:
        submit(functools.partial(fn, value))

    return _marshaled


# ─── Dispatcher factories ────────────────────────────────────────────────────


def executor_dispatcher(executor: Executor) -> Dispatch:
    """Dispatch onto a concurrent.futures executor.

    ThreadPoolExecutor(max_workers=1) gives a serial, FIFO context.
    """
    return executor.submit


def loop_dispatcher(loop: asyncio.AbstractEventLoop) -> Dispatch:
    """Dispatch onto an asyncio event loop, from any thread."""
    return loop.call_soon_threadsafe


# ─── Consumer helpers ────────────────────────────────────────────────────────


def observe(
    observable: Observable[T],
    fn: Callable[[T], None],
    *,
    replay: bool = False,
    for_ui: bool = False,
    dispatch: Dispatch | None = None,
) -> Receipt:
    """Bind fn to observable, optionally delivering on the UI context."""
    if for_ui:
        return observable.bind_ui(fn, replay=replay, dispatch=dispatch)
    return observable.bind(fn, replay=replay)


def observe_ui(
    observable: Observable[T],
    fn: Callable[[T], None],
    *,
    replay: bool = True,
    dispatch: Dispatch | None = None,
) -> Receipt:
    return observe(observable, fn, replay=replay, for_ui=True, dispatch=dispatch)
