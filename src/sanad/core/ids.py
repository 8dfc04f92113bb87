"""Process-unique identifiers for records created without a backend."""

import itertools
import threading
import time

_counter = itertools.count(1)
_lock = threading.Lock()


def utc_millis() -> int:
    return time.time_ns() // 1_000_000


def generate_local_id(prefix: str) -> str:
    """Return ``<prefix>-<epoch ms>-<counter>``.

    The counter is monotonic for the life of the process, so two ids
    generated within the same millisecond never collide.
    """
    with _lock:
        sequence = next(_counter)
    return f"{prefix}-{utc_millis()}-{sequence:06d}"
