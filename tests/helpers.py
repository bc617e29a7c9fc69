"""Polling helpers for tests that wait on the decode worker thread."""

import time


def wait_for_results(supervisor, count, timeout=5.0):
    """Poll until ``count`` results have arrived or ``timeout`` passes."""
    results = []
    deadline = time.monotonic() + timeout
    while len(results) < count and time.monotonic() < deadline:
        results.extend(supervisor.poll())
        if len(results) < count:
            time.sleep(0.005)
    return results


def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()
