"""Receipts — identity tokens for subscriptions.

A Receipt is what subscribe() hands back and what unsubscribe() takes.
PausableReceipt adds the source's pause/resume/unsubscribe capabilities so a
consumer can manage a subscription without holding the Observable itself.
ReceiptBag groups pausable receipts for bulk control.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Callable, Iterator


@dataclass(frozen=True)
class Receipt:
    """Opaque, unique subscription token. Compared and hashed by id only."""

    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __repr__(self) -> str:
        return f"Receipt({self.id.hex[:8]})"


@dataclass(frozen=True)
class PausableReceipt:
    """A Receipt bundled with capabilities bound to its source Observable."""

    receipt: Receipt
    _unsubscribe: Callable[[Receipt], None] = field(repr=False)
    _pause: Callable[[], None] = field(repr=False)
    _resume: Callable[[], None] = field(repr=False)

    def unsubscribe(self) -> None:
        self._unsubscribe(self.receipt)

    def pause(self) -> None:
        """Pause the source. Affects every subscriber of that Observable."""
        self._pause()

    def resume(self) -> None:
        self._resume()

    def add_to(self, bag: ReceiptBag) -> PausableReceipt:
        """Register in a bag. Returns self so it can end a bind chain."""
        bag.add(self)
        return self


class ReceiptBag:
    """Ordered group of PausableReceipts, paused and resumed together.

    Usage:
        bag = ReceiptBag()
        model.title.bind_pausable(label.update).add_to(bag)
        model.progress.bind_pausable(bar.update).add_to(bag)

        bag.pause()    # view offscreen
        bag.resume()   # back on screen
    """

    def __init__(self) -> None:
        self.receipts: list[PausableReceipt] = []

    def add(self, receipt: PausableReceipt) -> None:
        self.receipts.append(receipt)

    def pause(self) -> None:
        for r in self.receipts:
            r.pause()

    def resume(self) -> None:
        for r in self.receipts:
            r.resume()

    def dispose(self) -> None:
        """Unsubscribe every receipt and empty the bag."""
        receipts, self.receipts = self.receipts, []
        for r in receipts:
            r.unsubscribe()

    def __len__(self) -> int:
        return len(self.receipts)

    def __iter__(self) -> Iterator[PausableReceipt]:
        return iter(list(self.receipts))

    def __repr__(self) -> str:
        return f"ReceiptBag({len(self.receipts)} receipts)"
