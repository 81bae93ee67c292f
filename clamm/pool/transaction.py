"""Undo journal shared by every pool and token touched by one operation.

A pool operation opens a transaction; pool and token operations started from
its settlement callbacks join it instead of opening their own. Each
participant records how to undo its own change, so a failure rolls back
exactly what the failed operation did, across every pool and token it
reached, without overwriting changes made by other threads.

A nested operation rolls back to its savepoint when it fails, so a callback
that catches the error keeps everything that happened before the call. Locks
taken by nested operations are held until the outermost transaction ends.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar

import structlog

__all__ = ["Transaction", "atomic", "current_transaction", "record_undo"]

logger = structlog.get_logger()

# Transaction active in the current thread or task
_current: ContextVar[Transaction | None] = ContextVar("clamm_transaction", default=None)


class Transaction:
    """Ordered undo log plus the locks released when the transaction ends."""

    def __init__(self) -> None:
        self._undo: list[Callable[[], None]] = []
        self._on_close: list[Callable[[], None]] = []

    def record(self, undo: Callable[[], None]) -> None:
        self._undo.append(undo)

    def on_close(self, release: Callable[[], None]) -> None:
        """Run `release` once the outermost transaction has committed or rolled back."""
        self._on_close.append(release)

    def savepoint(self) -> int:
        return len(self._undo)

    def rollback_to(self, savepoint: int) -> None:
        """Undo every change recorded after `savepoint`, newest first."""
        undone = 0
        while len(self._undo) > savepoint:
            self._undo.pop()()
            undone += 1
        if undone:
            logger.debug("transaction_rolled_back", savepoint=savepoint, undone=undone)

    def _close(self) -> None:
        while self._on_close:
            self._on_close.pop()()


def current_transaction() -> Transaction | None:
    return _current.get()


def record_undo(undo: Callable[[], None]) -> None:
    """Record `undo` in the active transaction, if any.

    Changes made outside a transaction are final.
    """
    transaction = _current.get()
    if transaction is not None:
        transaction.record(undo)


@contextmanager
def atomic() -> Iterator[Transaction]:
    """Open a transaction, or join the active one at a new savepoint.

    On an exception everything recorded inside the block is undone before the
    exception propagates.
    """
    outer = _current.get()
    if outer is not None:
        savepoint = outer.savepoint()
        try:
            yield outer
        except Exception:
            outer.rollback_to(savepoint)
            raise
        return

    transaction = Transaction()
    token = _current.set(transaction)
    try:
        yield transaction
    except Exception:
        transaction.rollback_to(0)
        raise
    finally:
        _current.reset(token)
        transaction._close()
