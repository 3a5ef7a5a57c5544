"""
Closable, bounded job channel shared by one producer and many workers.

``close()`` is the only end-of-work signal: once the queue is closed *and*
drained, :meth:`JobQueue.get` returns ``None`` to every waiting worker.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Iterator, Optional

from loaddriver.errors import QueueClosed
from loaddriver.model import Job


class JobQueue:
    def __init__(self, maxsize: int) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")
        self.maxsize = maxsize
        self._items: Deque[Job] = deque()
        self._closed = False
        self._cond = threading.Condition()

    def put(self, job: Job) -> None:
        """Enqueue *job*, blocking while the queue is full."""
        with self._cond:
            while len(self._items) >= self.maxsize and not self._closed:
                self._cond.wait()
            if self._closed:
                raise QueueClosed("cannot enqueue into a closed queue")
            self._items.append(job)
            self._cond.notify_all()

    def get(self) -> Optional[Job]:
        """Dequeue the next job; ``None`` once the queue is closed and empty."""
        with self._cond:
            while not self._items and not self._closed:
                self._cond.wait()
            if not self._items:
                return None
            job = self._items.popleft()
            self._cond.notify_all()  # wake a producer blocked on a full queue
            return job

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def __iter__(self) -> Iterator[Job]:
        while True:
            job = self.get()
            if job is None:
                return
            yield job
