r"""Caller-side cancellation of requests.

A ``CancellationToken`` is the caller's own cancellation signal. When it
is cancelled while a request is in flight, the transport call is
abandoned and ``asyncio.CancelledError`` propagates to the caller. The
retry coordinator never mistakes such a cancellation for a timeout.
"""

from __future__ import annotations

__all__ = ["CancellationToken"]

import asyncio
import logging
from contextlib import suppress
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable

T = TypeVar("T")

logger: logging.Logger = logging.getLogger(__name__)


class CancellationToken:
    """Signal used by a caller to cancel its requests.

    A token can be shared by several requests, and cancelling it cancels
    all of them. Once cancelled, a token stays cancelled.

    Example:
        ```pycon
        >>> from afluent import CancellationToken
        >>> token = CancellationToken()
        >>> token.is_cancellation_requested
        False
        >>> token.cancel()
        >>> token.is_cancellation_requested
        True

        ```
    """

    def __init__(self) -> None:
        self._cancelled = asyncio.Event()

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(cancelled={self.is_cancellation_requested})"

    @property
    def is_cancellation_requested(self) -> bool:
        """Whether the token was cancelled."""
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Cancel the token and the requests bound to it."""
        self._cancelled.set()

    def raise_if_cancelled(self) -> None:
        """Raise ``asyncio.CancelledError`` if the token was cancelled."""
        if self.is_cancellation_requested:
            msg = "The request was cancelled by its cancellation token"
            raise asyncio.CancelledError(msg)

    async def wait(self) -> None:
        """Wait until the token is cancelled."""
        await self._cancelled.wait()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await an operation unless the token is cancelled first.

        Args:
            awaitable: The operation to run.

        Returns:
            The result of the operation.

        Raises:
            asyncio.CancelledError: If the token is cancelled before the
                operation completes. The operation is then cancelled and
                awaited, so its cleanup is done when the error is raised.
        """
        if self.is_cancellation_requested:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_cancelled()
        operation = asyncio.ensure_future(awaitable)
        watcher = asyncio.ensure_future(self._cancelled.wait())
        try:
            await asyncio.wait({operation, watcher}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            watcher.cancel()
            if not operation.done():
                operation.cancel()
                with suppress(asyncio.CancelledError):
                    await operation
        if operation.cancelled():
            logger.debug("Operation cancelled by its cancellation token")
            self.raise_if_cancelled()
        return operation.result()
