# src/rootshare/services/cancellation.py
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

import asyncio
import threading
from typing import Callable, Optional, TypeVar

from ..core.exceptions import OperationCancelled

T = TypeVar("T")


class CancellationToken:
    """Thread-safe flag checked by long-running workers between units of work."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self):
        if self._event.is_set():
            raise OperationCancelled("Operation was cancelled")


def check_cancelled(token: Optional[CancellationToken]):
    if token is not None:
        token.raise_if_cancelled()


async def run_cancellable(func: Callable[..., T], *args, token: Optional[CancellationToken] = None) -> T:
    """
    Runs blocking ``func(*args, token)`` on a worker thread.

    If the awaiting task is cancelled (typically a client disconnect) the token
    is set so the worker stops at its next checkpoint.
    """
    token = token or CancellationToken()
    try:
        return await asyncio.to_thread(func, *args, token)
    except asyncio.CancelledError:
        token.cancel()
        raise
