"""
Bounded, thread-safe FIFO queue of pending detection jobs.

Any number of producers push jobs; a single consumer (the scheduler) drains
the whole queue at once. Every operation holds the same lock only long enough
to touch the backing deque.
"""

from __future__ import annotations

import threading
import time
import uuid
from collections import deque
from typing import Deque, List, Optional

from models.job import ImageFormat, Job

DEFAULT_CAPACITY = 10000


class JobQueue:
    """
    FIFO of pending jobs with an advisory capacity.

    ``push`` always admits; callers are expected to check ``is_full`` first.
    Because that check and the push are separate calls, concurrent producers
    can overshoot the capacity. ``offer`` performs both under one lock and is
    what the ingestion layer uses.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 0:
            raise ValueError("capacity must be non-negative")
        self.capacity = capacity
        self._jobs: Deque[Job] = deque()
        self._cond = threading.Condition()

    def __len__(self) -> int:
        with self._cond:
            return len(self._jobs)

    def push(self, image_location: str, format: ImageFormat) -> str:
        """Admit a job and return its new unique id."""
        with self._cond:
            return self._admit(image_location, format)

    def offer(self, image_location: str, format: ImageFormat) -> Optional[str]:
        """Admit a job unless the queue is full. Returns the id, or None if rejected."""
        with self._cond:
            if len(self._jobs) > self.capacity:
                return None
            return self._admit(image_location, format)

    def is_full(self) -> bool:
        """True when the queue holds more than ``capacity`` jobs."""
        with self._cond:
            return len(self._jobs) > self.capacity

    def drain(self) -> List[Job]:
        """Atomically remove and return all pending jobs in FIFO order."""
        with self._cond:
            jobs = list(self._jobs)
            self._jobs.clear()
        return jobs

    def wait_for_jobs(self, timeout: Optional[float] = None) -> bool:
        """
        Block until at least one job is pending or ``timeout`` seconds pass.

        Returns True if jobs are pending. Does not remove anything.
        """
        with self._cond:
            return self._cond.wait_for(lambda: len(self._jobs) > 0, timeout=timeout)

    def _admit(self, image_location: str, format: ImageFormat) -> str:
        # Caller holds the lock.
        job_id = str(uuid.uuid4())
        self._jobs.append(
            Job(
                id=job_id,
                image_location=str(image_location),
                format=format,
                enqueued_at=time.time(),
            )
        )
        self._cond.notify()
        return job_id
