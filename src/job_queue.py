from collections import deque
from threading import Condition


class QueueClosed(Exception):
    pass


class JobQueue:
    """
    Bounded FIFO of pending URLs.

    put() blocks while the queue is full, which pushes back on the input
    reader. get() blocks while it is empty and returns None once the queue
    has been closed and drained; that is the workers' only stop signal.
    """

    def __init__(self, maxsize: int):
        if maxsize < 1:
            raise ValueError(f"maxsize must be >= 1, got {maxsize}")
        self.maxsize = maxsize
        self._items = deque()
        self._closed = False
        self._cond = Condition()

    def put(self, job):
        with self._cond:
            while len(self._items) >= self.maxsize and not self._closed:
                self._cond.wait()
            if self._closed:
                raise QueueClosed("put() on a closed queue")
            self._items.append(job)
            self._cond.notify_all()

    def get(self):
        with self._cond:
            while not self._items and not self._closed:
                self._cond.wait()
            if not self._items:
                return None
            job = self._items.popleft()
            self._cond.notify_all()
            return job

    def close(self):
        with self._cond:
            self._closed = True
            self._cond.notify_all()
