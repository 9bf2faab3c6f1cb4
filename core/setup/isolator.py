"""
Isolator - run untrusted work on a worker thread under a hard time limit.

INVARIANTS:
1. Work NEVER runs on the caller's thread
2. Caller waits at most ``timeout`` (join-with-timeout, no unbounded block)
3. On timeout the worker is ABANDONED: anything it produces later is
   discarded and never reaches the caller
4. Exceptions raised by the work are re-raised on the caller's thread

Python threads cannot be killed. An abandoned worker is a daemon thread,
so it finishes on its own time and never blocks interpreter exit.
"""

from __future__ import annotations

from datetime import timedelta
from threading import Event, Lock, Thread
from typing import Any, Callable, Optional, TypeVar, Union

from core.logging import LogStream, get_logger

logger = get_logger(LogStream.SETUP)

T = TypeVar("T")


class IsolatorTimeoutError(TimeoutError):
    """Work did not complete within the isolator's time limit."""


class IsolatorFaultError(RuntimeError):
    """Work raised a BaseException (SystemExit, KeyboardInterrupt) in the worker."""


class _WorkerOutcome:
    """Hand-off slot between worker and caller, guarded by one lock."""

    def __init__(self):
        self.lock = Lock()
        self.done = Event()
        self.abandoned = False
        self.result: Any = None
        self.error: Optional[BaseException] = None


def _to_seconds(timeout: Union[timedelta, float, int]) -> float:
    if isinstance(timeout, timedelta):
        return timeout.total_seconds()
    return float(timeout)


class Isolator:
    """
    Isolation boundary for loading and constructing algorithms.

    Usage:
        isolator = Isolator()
        algorithm = isolator.execute_with_time_limit(
            timedelta(seconds=10), loader_fn, name="AlgorithmLoader"
        )
    """

    def __init__(self):
        self.abandoned_workers = 0

    def execute_with_time_limit(
        self,
        timeout: Union[timedelta, float, int],
        fn: Callable[[], T],
        name: str = "IsolatorWorker"
    ) -> T:
        """
        Run ``fn`` on a worker thread and wait up to ``timeout``.

        Args:
            timeout: Max time to wait (timedelta or seconds, must be > 0)
            fn: Zero-argument callable
            name: Worker thread name (shows up in logs and thread dumps)

        Returns:
            Whatever ``fn`` returned

        Raises:
            ValueError: timeout not positive
            IsolatorTimeoutError: fn did not finish in time
            Exception: whatever fn raised
        """
        seconds = _to_seconds(timeout)
        if seconds <= 0:
            raise ValueError(f"Isolator timeout must be positive, got {timeout!r}")

        outcome = _WorkerOutcome()
        worker = Thread(
            target=self._run,
            args=(outcome, fn, name),
            name=name,
            daemon=True
        )
        worker.start()

        outcome.done.wait(seconds)

        # Decide under the lock so a worker finishing right now either
        # delivers its result or sees the abandoned flag, never both.
        with outcome.lock:
            if not outcome.done.is_set():
                outcome.abandoned = True
                self.abandoned_workers += 1
                logger.error(f"[ISOLATOR] {name} exceeded {seconds:g}s time limit, abandoning worker")
                raise IsolatorTimeoutError(f"Execution exceeded time limit of {seconds:g} seconds")

            result, error = outcome.result, outcome.error
            outcome.result = None
            outcome.error = None

        worker.join(timeout=1.0)

        if error is not None:
            raise error
        return result

    @staticmethod
    def _run(outcome: _WorkerOutcome, fn: Callable[[], Any], name: str) -> None:
        result: Any = None
        error: Optional[BaseException] = None

        try:
            result = fn()
        except Exception as e:
            error = e
        except BaseException as e:
            # Never let SystemExit / KeyboardInterrupt escape into the host
            error = IsolatorFaultError(f"{name} raised {type(e).__name__}: {e}")

        with outcome.lock:
            if outcome.abandoned:
                logger.warning(f"[ISOLATOR] {name} finished after being abandoned, discarding result")
                return
            outcome.result = result
            outcome.error = error
            outcome.done.set()
