"""
Runs a unit of work against a timer.

The work is started on a daemon thread and its outcome is delivered through
a `concurrent.futures.Future`. The caller waits on the future for at most
`timeout` seconds; whichever comes first (the result or the timer) decides.
A late result is simply discarded: the worker is not interrupted, only
abandoned, and being a daemon thread it never blocks interpreter exit.
"""

import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Callable, Optional, TypeVar

from license_finder.utility.log import get_logger

log = get_logger(__name__)

T = TypeVar("T")


class DeadlineExceeded(Exception):
    """The unit of work did not complete before the timer fired."""

    def __init__(self, timeout: float, name: Optional[str] = None):
        super().__init__(f"{name or 'task'} did not complete within {timeout}s")
        self.timeout = timeout
        self.name = name


def run_with_deadline(fn: Callable[[], T], timeout: float, *, name: Optional[str] = None) -> T:
    """
    Calls `fn` on a worker thread and returns its result, or raises
    `DeadlineExceeded` if it has not finished after `timeout` seconds.

    Exceptions raised by `fn` are re-raised in the caller unchanged.
    A result that lands just as the timer fires is still returned.
    """
    future: "Future[T]" = Future()

    def _work() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = fn()
        except BaseException as exc:  # noqa: BLE001 - handed over to the waiting caller
            future.set_exception(exc)
        else:
            future.set_result(result)

    worker = threading.Thread(target=_work, name=name, daemon=True)
    worker.start()

    try:
        return future.result(timeout=timeout)
    except FuturesTimeoutError:
        # fn finished while the wait was giving up, or raised a TimeoutError itself
        if future.done():
            return future.result()
        log.debug("Abandoning %s after %ss", worker.name, timeout)
        raise DeadlineExceeded(timeout, worker.name) from None
