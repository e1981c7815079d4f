# Copyright (c) 2026 Yarnmap
# SPDX-License-Identifier: MIT

"""
Exception types raised across the public API.

Only two conditions ever reach callers as failures:
- InvalidArgumentError: bad input, raised before any pixel is read
- CancelledError: cooperative cancellation observed at a checkpoint

Encoding failures and iteration-cap truncation are recovered internally
and only show up in logs.
"""

from __future__ import annotations

from typing import Optional


class YarnmapError(Exception):
    """Base class for all Yarnmap errors."""


class InvalidArgumentError(YarnmapError, ValueError):
    """An argument is out of range or malformed."""


class CancelledError(YarnmapError):
    """Processing was stopped through a cancellation token."""

    def __init__(self, reason: Optional[str] = None) -> None:
        self.reason = reason
        message = "Operation was cancelled"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
