"""Shared pytest fixtures for twoway tests."""

import pytest

from twoway import set_ui_dispatcher


@pytest.fixture(autouse=True)
def reset_ui_dispatcher():
    """Clear the process-wide UI dispatcher so tests don't leak into each other."""
    set_ui_dispatcher(None)
    yield
    set_ui_dispatcher(None)


class QueueDispatcher:
    """Dispatcher that queues calls until drain(). Stands in for a UI loop."""

    def __init__(self):
        self.pending = []

    def __call__(self, fn):
        self.pending.append(fn)

    def drain(self):
        while self.pending:
            self.pending.pop(0)()


@pytest.fixture
def ui_queue():
    return QueueDispatcher()
