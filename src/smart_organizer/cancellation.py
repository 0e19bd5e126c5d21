"""Cooperative cancellation shared by scanning, hashing, and execution."""

from __future__ import annotations

import threading
import time

from .errors import OperationCancelled


class CancellationToken:
    """Signal that long-running work should stop starting new units.

    A token fires either when `cancel()` is called or once the optional
    timeout elapses. Work already in flight is allowed to finish.
    """

    def __init__(self, timeout_seconds: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline: float | None = None
        if timeout_seconds is not None and timeout_seconds > 0:
            self._deadline = time.monotonic() + timeout_seconds

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Return True once cancellation was requested or the deadline passed."""
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def raise_if_cancelled(self, stage: str) -> None:
        """Raise `OperationCancelled` when the token has fired.

        Args:
            stage: Name of the stage being interrupted, used in the message.

        Raises:
            OperationCancelled: If cancellation was requested.
        """
        if self.cancelled:
            raise OperationCancelled(f"Cancelled during {stage}.", details={"stage": stage})


__all__ = ["CancellationToken"]
