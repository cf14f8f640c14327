"""
Cancellation tokens shared between callers and background stream operations.

A token is fired once, either explicitly with ``cancel()`` or when its
deadline passes, and stays fired. Child tokens fire together with their
parent but can also be cancelled on their own.

Child tokens hold a callback on their parent and deadline tokens hold a
timer thread. Both are released when the child fires or when it is closed,
so derive per-call tokens in a ``with`` block when the parent is long-lived::

    with parent.with_timeout(30) as token:
        client.compress_bytes(data, token)
"""

import logging
import threading
from concurrent.futures import Future
from typing import Callable, List, Optional

from .errors import OperationCancelledError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe, one-shot cancellation signal"""

    def __init__(self, parent: Optional['CancellationToken'] = None):
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._future: Future = Future()
        self._callbacks: List[Callable[[], None]] = []
        self._reason: Optional[str] = None
        self._timer: Optional[threading.Timer] = None
        self._parent = parent
        self._parent_callback: Optional[Callable[[], None]] = None

        if parent is not None:
            self._parent_callback = lambda: self.cancel(parent.reason)
            parent.add_callback(self._parent_callback)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    @property
    def future(self) -> Future:
        """Future resolved when the token fires, usable with ``concurrent.futures.wait``."""
        return self._future

    @property
    def pending_callbacks(self) -> int:
        """Number of callbacks waiting for the token to fire."""
        with self._lock:
            return len(self._callbacks)

    def cancel(self, reason: Optional[str] = "cancelled") -> bool:
        """
        Fire the token.

        Returns:
            True if this call fired the token, False if it was already fired
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []

        self._release()
        logger.debug(f"Cancellation token fired: {reason}")
        self._future.set_result(reason)

        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Cancellation callback failed: {e}")
        return True

    def close(self) -> None:
        """
        Detach the token from its parent and stop its deadline timer.

        A closed token is no longer fired by its parent or its deadline but
        can still be cancelled explicitly.
        """
        self._release()

    def _release(self) -> None:
        with self._lock:
            timer, self._timer = self._timer, None
            parent, self._parent = self._parent, None
            parent_callback, self._parent_callback = self._parent_callback, None

        if timer is not None:
            timer.cancel()
        if parent is not None and parent_callback is not None:
            parent.remove_callback(parent_callback)

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` when the token fires, or right away if it already has."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> bool:
        """Forget a callback registered with ``add_callback``. Returns True if it was pending."""
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                return False
            return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError(self._reason)

    def child(self) -> 'CancellationToken':
        return CancellationToken(parent=self)

    def with_timeout(self, seconds: float) -> 'CancellationToken':
        """Create a child token which also fires after ``seconds``."""
        if seconds < 0:
            raise ValueError("timeout cannot be negative")

        token = CancellationToken(parent=self)
        timer = threading.Timer(seconds, token.cancel, args=("deadline exceeded",))
        timer.daemon = True
        with token._lock:
            if token._event.is_set():
                return token
            token._timer = timer
        timer.start()
        return token

    def __enter__(self) -> 'CancellationToken':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = f"cancelled, reason={self._reason!r}" if self.cancelled else "active"
        return f"CancellationToken({state})"


def background() -> CancellationToken:
    """Token which is never fired unless cancelled explicitly."""
    return CancellationToken()
