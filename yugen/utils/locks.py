import threading
from contextlib import contextmanager

# user id -> [lock, number of holders and waiters]
_locks = {}
_registry_lock = threading.Lock()


@contextmanager
def user_lock(user_id: str):
    """Serialize work for one user within this process."""
    key = str(user_id)
    with _registry_lock:
        entry = _locks.setdefault(key, [threading.Lock(), 0])
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _registry_lock:
            entry[1] -= 1
            if entry[1] == 0:
                _locks.pop(key, None)
