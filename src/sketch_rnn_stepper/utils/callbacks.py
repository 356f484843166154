"""Completion-callback adapter for awaitable operations."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")

CompletionCallback = Callable[[Optional[BaseException], Any], Any]

logger = logging.getLogger("sketch rnn stepper.callbacks")


def call_callback(
    awaitable: Awaitable[T],
    callback: Optional[CompletionCallback] = None,
) -> "asyncio.Future[T]":
    """Schedule ``awaitable`` and optionally report its outcome to ``callback``.

    The returned future is always the primary interface: callers may await it
    whether or not they passed a callback. When ``callback`` is given it is called
    once as ``callback(None, result)`` on success or ``callback(error, None)`` on
    failure; the future still carries the failure for anyone awaiting it.

    Must be called while an event loop is running.
    """

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise
    future = asyncio.ensure_future(awaitable, loop=loop)
    if callback is None:
        return future

    def _notify(done: "asyncio.Future[T]") -> None:
        if done.cancelled():
            callback(asyncio.CancelledError(), None)
            return
        error = done.exception()
        if error is not None:
            logger.debug("Reporting failure to completion callback: %r", error)
            callback(error, None)
            return
        callback(None, done.result())

    future.add_done_callback(_notify)
    return future


__all__ = ["CompletionCallback", "call_callback"]
