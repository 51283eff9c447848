"""
Cancellation and deadlines for long-running tree operations.

A full walk over a large remote tree can take arbitrarily long, so the
top-level operations accept a CancelToken and check it between remote calls.
"""

import threading
import time

from .errors import DeadlineExceeded, OperationCancelled


class CancelToken:
    """Cooperative cancellation flag with an optional deadline.

    ``cancel()`` may be called from any thread; the operation holding the
    token notices at its next ``check()``.
    """

    def __init__(self, deadline_seconds: float | None = None):
        self._event = threading.Event()
        self._deadline: float | None = None
        if deadline_seconds is not None:
            self._deadline = time.monotonic() + deadline_seconds

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when there is none."""
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)

    def check(self, operation: str = "operation") -> None:
        """Raise if the token was cancelled or its deadline has passed."""
        if self._event.is_set():
            raise OperationCancelled(f"{operation} cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise DeadlineExceeded(f"{operation} exceeded its deadline")


def check_cancelled(cancel: CancelToken | None, operation: str) -> None:
    if cancel is not None:
        cancel.check(operation)
