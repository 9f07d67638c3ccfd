import threading
import time

_last_id = 0
_lock = threading.Lock()


def unique_millis() -> int:
    """
    Current time in epoch milliseconds, bumped when needed so that two calls
    in the same process never return the same (or a smaller) value.
    """
    global _last_id
    with _lock:
        now = time.time_ns() // 1_000_000
        _last_id = max(now, _last_id + 1)
        return _last_id
