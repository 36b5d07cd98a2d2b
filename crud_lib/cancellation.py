"""Cooperative cancellation signal accepted by every store operation."""
from __future__ import annotations
import asyncio
from typing import Optional

from .errors import OperationCancelled


class CancellationToken:
    """One-shot cancellation flag backed by an :class:`asyncio.Event`.

    The token may be shared between several operations; once cancelled it
    stays cancelled.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self, operation: str, key=None) -> None:
        if self._event.is_set():
            raise OperationCancelled(operation, key)
