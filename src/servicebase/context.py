"""
Cancellable execution context.

A CancelContext carries a single "stop" signal that any number of threads
and event loops can observe. Cancelling a context cancels every context
derived from it. Cancellation is one-way: once cancelled, a context stays
cancelled.

Usage:
    ctx, cancel = with_cancel()

    # worker thread
    while not ctx.cancelled:
        ...

    # coroutine
    await ctx.wait_cancelled()

    # anywhere, any number of times
    cancel()
"""

import asyncio
import threading
from collections.abc import Callable

from servicebase.logging.setup import get_logger

logger = get_logger(__name__)

DoneCallback = Callable[["CancelContext"], None]


class ContextCancelled(Exception):
    """The context was cancelled."""

    def __init__(self, message: str = "context cancelled"):
        super().__init__(message)


class CancelContext:
    """
    Thread-safe cancellation signal with parent/child propagation.

    Do not instantiate directly; use with_cancel().
    """

    def __init__(self, parent: "CancelContext | None" = None):
        self._parent = parent
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[DoneCallback] = []
        self._err: ContextCancelled | None = None

        if parent is not None:
            parent.add_done_callback(self._cancel_from_parent)

    @property
    def parent(self) -> "CancelContext | None":
        return self._parent

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def err(self) -> ContextCancelled | None:
        """Return None while active, the cancellation error afterwards."""
        with self._lock:
            return self._err

    def raise_if_cancelled(self) -> None:
        err = self.err()
        if err is not None:
            raise err

    def cancel(self, reason: str | None = None) -> None:
        """
        Cancel this context and every context derived from it.

        Safe to call from any thread and any number of times; only the
        first call has an effect.
        """
        with self._lock:
            if self._err is not None:
                return
            self._err = ContextCancelled(reason) if reason else ContextCancelled()
            callbacks, self._callbacks = self._callbacks, []
            self._event.set()

        # Detach from the parent so long-lived roots do not accumulate children
        if self._parent is not None:
            self._parent.remove_done_callback(self._cancel_from_parent)

        for callback in callbacks:
            self._run_callback(callback)

    def _cancel_from_parent(self, parent: "CancelContext") -> None:
        err = parent.err()
        self.cancel(str(err) if err else None)

    def _run_callback(self, callback: DoneCallback) -> None:
        try:
            callback(self)
        except Exception:
            logger.exception(
                "Cancellation callback failed",
                extra={"callback": getattr(callback, "__qualname__", repr(callback))},
            )

    def add_done_callback(self, callback: DoneCallback) -> None:
        """
        Run ``callback(ctx)`` once when the context is cancelled.

        Runs immediately, in the calling thread, if the context is already
        cancelled. Otherwise runs in the thread that cancels.
        """
        with self._lock:
            if self._err is None:
                self._callbacks.append(callback)
                return
        self._run_callback(callback)

    def remove_done_callback(self, callback: DoneCallback) -> bool:
        """Unregister a callback. Returns False if it was not registered."""
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                return False
            return True

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled. Returns False if the timeout expired first."""
        return self._event.wait(timeout)

    async def wait_cancelled(self) -> None:
        """Wait for cancellation without blocking the running event loop."""
        if self.cancelled:
            return

        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()

        def _wake(future: asyncio.Future[None]) -> None:
            if not future.done():
                future.set_result(None)

        def _on_cancel(_ctx: "CancelContext") -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(_wake, waiter)

        self.add_done_callback(_on_cancel)
        try:
            await waiter
        finally:
            self.remove_done_callback(_on_cancel)

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "active"
        return f"<CancelContext {state}>"


def with_cancel(
    parent: CancelContext | None = None,
) -> tuple[CancelContext, Callable[[], None]]:
    """
    Create a cancellable context and its cancellation trigger.

    Args:
        parent: Context to derive from. Cancelling the parent cancels the
            new context; cancelling the new context leaves the parent alone.
            When None, the new context is a root that only its own trigger
            can cancel.

    Returns:
        Tuple of (context, cancel). ``cancel`` takes no arguments and is
        idempotent.
    """
    ctx = CancelContext(parent)

    def cancel() -> None:
        ctx.cancel()

    return ctx, cancel


__all__ = [
    "CancelContext",
    "ContextCancelled",
    "with_cancel",
]
