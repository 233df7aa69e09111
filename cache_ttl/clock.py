"""
Time source used by the TTL plugin.
Anything with a `now()` method returning POSIX seconds can stand in for it.
"""
import time


class SystemClock:
    def now(self) -> float:
        return time.time()
