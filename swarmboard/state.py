import threading
import time


class ProcessState:
    """Per-process counters, owned by the app and reset on restart."""

    def __init__(self):
        self._lock = threading.Lock()
        self.started_at = time.time()
        self.request_count = 0

    def count_request(self):
        with self._lock:
            self.request_count += 1
            return self.request_count

    def snapshot(self):
        with self._lock:
            return {
                "requestCount": self.request_count,
                "processUptime": int(time.time() - self.started_at),
            }
