import time
from collections import deque
from threading import Lock


class SimpleRateLimiter:
    """In-memory sliding-window request counter, one bucket per key.

    Guards the HTTP surface against request floods before the click gate
    is consulted. Per process only.
    """

    def __init__(self, clock=time.monotonic):
        self.calls = {}  # key -> deque of timestamps
        self.lock = Lock()
        self.clock = clock
        self._last_sweep = None

    def allow(self, key: str, max_calls: int, period: int) -> bool:
        """Return True if the call is allowed for key under given rate.

        key: a string identifying the bucket (e.g., client ip)
        max_calls: maximum number of calls
        period: time window in seconds
        """
        now = self.clock()
        cutoff = now - period
        with self.lock:
            if self._last_sweep is None or now - self._last_sweep >= period:
                self._sweep(cutoff)
                self._last_sweep = now
            q = self.calls.get(key)
            if q is None:
                self.calls[key] = deque([now])
                return True
            # drop timestamps outside the window
            while q and q[0] <= cutoff:
                q.popleft()
            if len(q) < max_calls:
                q.append(now)
                return True
            return False

    def _sweep(self, cutoff):
        # forget keys with no call inside the window
        stale = [k for k, q in self.calls.items() if not q or q[-1] <= cutoff]
        for k in stale:
            del self.calls[k]
