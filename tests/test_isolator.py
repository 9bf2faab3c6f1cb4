"""
Isolator time-limit tests.

INVARIANTS:
1. Work runs on a worker thread, never the caller's
2. Results and exceptions cross back to the caller
3. On timeout the caller gets IsolatorTimeoutError and the late result is
   discarded
"""

import threading
import time
from datetime import timedelta

import pytest

from core.setup import Isolator, IsolatorFaultError, IsolatorTimeoutError


def test_returns_result_from_worker_thread():
    caller = threading.get_ident()
    seen = {}

    def work():
        seen["thread"] = threading.get_ident()
        return 42

    assert Isolator().execute_with_time_limit(timedelta(seconds=5), work) == 42
    assert seen["thread"] != caller


def test_accepts_seconds_as_number():
    assert Isolator().execute_with_time_limit(5, lambda: "ok") == "ok"


@pytest.mark.parametrize("timeout", [0, -1, timedelta(0)])
def test_rejects_non_positive_timeout(timeout):
    with pytest.raises(ValueError):
        Isolator().execute_with_time_limit(timeout, lambda: None)


def test_reraises_worker_exception():
    def boom():
        raise KeyError("missing")

    with pytest.raises(KeyError, match="missing"):
        Isolator().execute_with_time_limit(5, boom)


def test_system_exit_in_worker_becomes_fault():
    def leave():
        raise SystemExit(3)

    with pytest.raises(IsolatorFaultError, match="SystemExit"):
        Isolator().execute_with_time_limit(5, leave, name="Leaver")


def test_timeout_abandons_worker_and_discards_late_result():
    isolator = Isolator()
    release = threading.Event()
    finished = threading.Event()

    def slow():
        release.wait(5)
        finished.set()
        return "late"

    started = time.monotonic()
    with pytest.raises(IsolatorTimeoutError, match="time limit"):
        isolator.execute_with_time_limit(timedelta(milliseconds=100), slow)
    assert time.monotonic() - started < 2

    assert isolator.abandoned_workers == 1

    # Let the worker finish; its result has nowhere to go
    release.set()
    assert finished.wait(5)


def test_timeout_is_a_builtin_timeout_error():
    assert issubclass(IsolatorTimeoutError, TimeoutError)
