"""twoway: observable values with receipts, combinators and UI-thread delivery."""

from importlib.metadata import version as _version

__version__ = _version("twoway")

from twoway.receipt import Receipt, PausableReceipt, ReceiptBag
from twoway.observable import Observable
from twoway.zipping import zip
from twoway.dispatch import (
    Dispatch,
    set_ui_dispatcher,
    get_ui_dispatcher,
    marshal,
    executor_dispatcher,
    loop_dispatcher,
    observe,
    observe_ui,
)
# textual NOT auto-imported — opt-in only

__all__ = [
    "Observable",
    "Receipt",
    "PausableReceipt",
    "ReceiptBag",
    "zip",
    "Dispatch",
    "set_ui_dispatcher",
    "get_ui_dispatcher",
    "marshal",
    "executor_dispatcher",
    "loop_dispatcher",
    "observe",
    "observe_ui",
]
