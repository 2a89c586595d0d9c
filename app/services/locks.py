"""
Per-application mutexes
Serializes workflow transitions on the same application within one process

Entries are reference counted and dropped when the last holder leaves, so the
registry only ever holds ids with a transition in flight.
"""

import threading
from contextlib import contextmanager
from typing import Any, Dict, List

_registry_lock = threading.Lock()
# key -> [lock, number of threads holding or waiting for it]
_application_locks: Dict[str, List[Any]] = {}


def _checkout(key: str) -> threading.RLock:
    with _registry_lock:
        entry = _application_locks.get(key)
        if entry is None:
            entry = [threading.RLock(), 0]
            _application_locks[key] = entry
        entry[1] += 1
        return entry[0]


def _release(key: str) -> None:
    with _registry_lock:
        entry = _application_locks[key]
        entry[1] -= 1
        if entry[1] == 0:
            del _application_locks[key]


@contextmanager
def application_lock(application_id: Any):
    """Hold the application's mutex for the duration of the block"""
    key = str(application_id)
    lock = _checkout(key)
    try:
        with lock:
            yield
    finally:
        _release(key)


def active_lock_count() -> int:
    """Number of application ids with a transition in flight"""
    with _registry_lock:
        return len(_application_locks)
