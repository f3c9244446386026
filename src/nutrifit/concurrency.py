"""
concurrency.py

Purpose:
    Run an in-process call with an upper bound on how long the caller waits.

    Used by the time-bounded variants ClusterPredictor.predict_within() and
    RecipeCatalog.load_within() so a remote scorer or catalog source can be
    swapped in without changing the plain predict()/load() contracts.
"""
from __future__ import annotations

import concurrent.futures
from typing import Callable, Optional, TypeVar

from nutrifit.logging_utils import get_logger

logger = get_logger("concurrency")

T = TypeVar("T")


class CallTimedOut(Exception):
    """Raised when fn did not finish within the allotted seconds."""


def call_with_timeout(fn: Callable[[], T], timeout: Optional[float]) -> T:
    """
    Call fn() and return its result, waiting at most `timeout` seconds.

    timeout=None calls fn directly on the current thread. On overrun the
    worker future is cancelled (best effort; a call already running keeps
    running in the background) and CallTimedOut is raised. Exceptions
    raised by fn propagate unchanged.
    """
    if timeout is None:
        return fn()

    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    future = executor.submit(fn)
    try:
        return future.result(timeout=timeout)
    except concurrent.futures.TimeoutError as exc:
        future.cancel()
        logger.warning(
            "Call to %s exceeded %.3fs",
            getattr(fn, "__qualname__", repr(fn)),
            timeout,
            extra={
                "invoking_func": "call_with_timeout",
                "invoking_purpose": "Bound the wait on a scorer / catalog call",
                "next_step": "Raise CallTimedOut to the caller",
                "resolution": "Raise the timeout setting or check the remote dependency",
            },
        )
        raise CallTimedOut(f"call did not finish within {timeout}s") from exc
    finally:
        # Do not block on a still-running worker.
        executor.shutdown(wait=False)
