"""
Cancellation Tokens

A CancellationToken is the handle an in-flight operation watches to learn
that it should stop. Cancelling a token:

- sets an asyncio.Event, waking every waiter
- runs registered callbacks (used to link child tokens to a parent)
- makes raise_if_cancelled() and sleep() raise CancellationError

sleep() waits on the token's event with a timeout rather than calling
asyncio.sleep, so a cancelled backoff wait returns immediately instead of
leaving a timer running.

Pattern: Cooperative cancellation (single-threaded asyncio scheduler)
"""

import asyncio
from typing import Callable, Optional

from tool_invoker.core.exceptions import CancellationError

DEFAULT_REASON = "Operation cancelled"


class CancellationToken:
    """
    Cooperative cancellation signal for one operation.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel("user aborted")
        >>> token.is_cancelled
        True
        >>> token.raise_if_cancelled()  # raises CancellationError
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Optional[str] = None
        self._callbacks: list[Callable[[str], None]] = []

    def __repr__(self) -> str:
        state = f"cancelled={self._reason!r}" if self.is_cancelled else "active"
        return f"<CancellationToken {state}>"

    @property
    def is_cancelled(self) -> bool:
        """Whether cancel() has been called."""
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        """Reason given to cancel(), None while active."""
        return self._reason

    def cancel(self, reason: str = DEFAULT_REASON) -> None:
        """
        Cancel the token. Idempotent: only the first reason is kept.

        Args:
            reason: Human-readable reason for the cancellation.
        """
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(reason)

    def add_callback(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """
        Register a callback invoked with the reason on cancellation.

        If the token is already cancelled the callback runs immediately.

        Returns:
            A function that unregisters the callback.
        """
        if self.is_cancelled:
            callback(self._reason or DEFAULT_REASON)
            return lambda: None

        self._callbacks.append(callback)

        def remove() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return remove

    def link(self, parent: Optional["CancellationToken"]) -> Callable[[], None]:
        """
        Cancel this token whenever ``parent`` is cancelled.

        Returns:
            A function that removes the link; call it when the operation
            settles so the parent does not keep a reference to this token.
        """
        if parent is None:
            return lambda: None
        return parent.add_callback(self.cancel)

    def raise_if_cancelled(self) -> None:
        """Raise CancellationError if the token has been cancelled."""
        if self.is_cancelled:
            raise CancellationError(self._reason or DEFAULT_REASON)

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        await self._event.wait()

    async def sleep(self, seconds: float) -> None:
        """
        Sleep for ``seconds`` unless cancelled first.

        Raises:
            CancellationError: If the token is (or becomes) cancelled.
        """
        self.raise_if_cancelled()
        if seconds <= 0:
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        raise CancellationError(self._reason or DEFAULT_REASON)


async def cancellable_sleep(seconds: float, token: CancellationToken) -> None:
    """Default sleeper used for backoff and rate-limit waits."""
    await token.sleep(seconds)
