"""
Cancellation tokens, used to stop the timer thread without waiting out its sleep.
"""

from threading import Event

__all__ = ["CancellationToken"]


class CancellationToken:
    """
    A flag that can be set once, waking up every thread waiting on it.
    """

    def __init__(self) -> None:
        self._cancelled = Event()

    def __repr__(self) -> str:
        status = "cancelled" if self.is_cancelled else "not cancelled"
        return f"<CancellationToken at {id(self):#x}: {status}>"

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """
        Cancel the token, waking up any waiting threads. Cancelling an already cancelled token does nothing.
        """
        self._cancelled.set()

    def wait(self, timeout: float | None = None) -> bool:
        """
        Block until the token is cancelled, or the timeout (in seconds) has passed.

        Returns:
            True if the token was cancelled, False if the timeout passed first.
        """
        return self._cancelled.wait(timeout)
