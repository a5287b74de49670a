"""In-process mutual exclusion per (user, date key) plan document."""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Tuple
from uuid import UUID
from weakref import WeakValueDictionary

from lifeplan.core.config import settings


class _KeyLock:
    __slots__ = ("lock", "__weakref__")

    def __init__(self) -> None:
        self.lock = threading.Lock()


# Entries disappear once no request holds or waits on them.
_locks: "WeakValueDictionary[Tuple[str, str], _KeyLock]" = WeakValueDictionary()
_registry_lock = threading.Lock()


@contextmanager
def plan_lock(user_id: UUID, date_key: str) -> Iterator[None]:
    """Serialize read-modify-write on one plan document within this process.

    Other processes still race; across workers the store stays last-writer-wins.
    Disabled entirely when ``plan_update_locking`` is off.
    """
    if not settings.plan_update_locking:
        yield
        return

    key = (str(user_id), date_key)
    with _registry_lock:
        key_lock = _locks.get(key)
        if key_lock is None:
            key_lock = _KeyLock()
            _locks[key] = key_lock

    with key_lock.lock:
        yield


def active_lock_count() -> int:
    return len(_locks)
