"""Cooperative cancellation token.

A token is created per dispatched call and threaded through the call
configuration. The transport subscribes to it; whoever owns the token
(the cancellation registry) flips it.

Usage:
    token = CancelToken()
    unsubscribe = token.on_cancel(lambda reason: task.cancel())
    token.cancel("superseded")
"""

from __future__ import annotations

from collections.abc import Callable

from actorflow.transport.errors import RequestCancelledError

CancelCallback = Callable[[str], None]


class CancelToken:
    """One-shot cancellation signal with synchronous subscribers."""

    __slots__ = ("_cancelled", "_reason", "_callbacks")

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: str | None = None
        self._callbacks: list[CancelCallback] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> bool:
        """Flip the token and notify subscribers.

        Args:
            reason: Human-readable cause, forwarded to every callback.

        Returns:
            True if this call cancelled the token, False if it already was.
        """
        if self._cancelled:
            return False
        self._cancelled = True
        self._reason = reason

        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(reason)
        return True

    def on_cancel(self, callback: CancelCallback) -> Callable[[], None]:
        """Subscribe to cancellation. Runs immediately if already cancelled.

        Returns:
            Function removing the subscription (no-op once fired).
        """
        if self._cancelled:
            callback(self._reason or "cancelled")
            return lambda: None

        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def raise_if_cancelled(self) -> None:
        """Raise RequestCancelledError if the token was flipped."""
        if self._cancelled:
            raise RequestCancelledError(self._reason or "cancelled")

    def __repr__(self) -> str:
        state = f"cancelled={self._reason!r}" if self._cancelled else "active"
        return f"CancelToken({state})"
