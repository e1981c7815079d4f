# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""
Cooperative cancellation and coarse progress reporting.

The segmentation engine polls a CancelToken at fixed checkpoints and
reports row progress through a ProgressReporter. Neither affects results.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from yarnmap.errors import CancelledError


ProgressCallback = Callable[[int], None]


class CancelToken:
    """
    Thread-safe cancellation flag.

    Example:
        >>> token = CancelToken()
        >>> token.cancel("user pressed stop")
        >>> token.raise_if_cancelled()
        Traceback (most recent call last):
        ...
        yarnmap.errors.CancelledError: Operation was cancelled: user pressed stop
    """

    __slots__ = ("_event", "_reason")

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        """Request cancellation. Later calls keep the first reason."""
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError(self._reason)


def check_cancelled(token: Optional[CancelToken]) -> None:
    """Checkpoint helper: no-op when no token was supplied."""
    if token is not None:
        token.raise_if_cancelled()


class ProgressReporter:
    """Maps completed rows to an integer percentage, reporting only changes."""

    __slots__ = ("_callback", "_total", "_last")

    def __init__(self, callback: Optional[ProgressCallback], total_rows: int) -> None:
        self._callback = callback
        self._total = total_rows
        self._last = -1

    def rows_done(self, rows: int) -> None:
        if self._callback is None:
            return
        if self._total <= 0:
            percent = 100
        else:
            percent = min(100, max(0, rows * 100 // self._total))
        if percent != self._last:
            self._last = percent
            self._callback(percent)

    def finish(self) -> None:
        if self._callback is not None and self._last != 100:
            self._last = 100
            self._callback(100)
