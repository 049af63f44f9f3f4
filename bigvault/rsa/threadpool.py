"""
Fixed-size worker pool.

Workers pull callables from one shared queue.Queue until they receive the
terminate sentinel. The queue's internal lock is the only synchronization
between the dispatching thread and the workers.

Example:
    >>> with ThreadPool(4) as pool:
    ...     pool.execute(lambda: print("hello"))
"""

import logging
import queue
import threading
from typing import Callable, List

from ..errors import PolicyViolation


logger = logging.getLogger(__name__)

Job = Callable[[], None]

# Placed once per worker on shutdown
_TERMINATE = object()


class Worker(threading.Thread):
    """One pool thread: runs jobs from the shared queue until terminated."""

    def __init__(self, worker_id: int, jobs: queue.Queue):
        super().__init__(name=f"bigvault-worker-{worker_id}")
        self.worker_id = worker_id
        self._jobs = jobs

    def run(self):
        while True:
            job = self._jobs.get()
            if job is _TERMINATE:
                logger.debug("Worker %d was told to terminate", self.worker_id)
                return
            logger.debug("Worker %d got a job; executing", self.worker_id)
            # The worker must survive to receive its sentinel.
            try:
                job()
            except Exception:
                logger.exception("Worker %d job raised", self.worker_id)


class ThreadPool:
    """
    Pool of `size` OS threads created up front and joined on shutdown.

    Use as a context manager so that shutdown() always runs; it enqueues
    one sentinel per worker and waits for every thread to exit.
    """

    def __init__(self, size: int):
        """
        Args:
            size: Number of worker threads (at least 1)

        Raises:
            PolicyViolation: If size < 1
        """
        if size < 1:
            raise PolicyViolation(f"Thread pool needs at least one worker, got {size}")
        self._jobs: queue.Queue = queue.Queue()
        self._workers: List[Worker] = [Worker(i, self._jobs) for i in range(size)]
        self._closed = False
        for worker in self._workers:
            worker.start()
        logger.debug("Started thread pool with %d worker(s)", size)

    @property
    def size(self) -> int:
        return len(self._workers)

    def execute(self, job: Job) -> None:
        """
        Queue a job for the next idle worker.

        Raises:
            RuntimeError: If the pool was already shut down
        """
        if self._closed:
            raise RuntimeError("Cannot execute jobs on a shut down thread pool")
        self._jobs.put(job)

    def shutdown(self) -> None:
        """Send a terminate sentinel to every worker and join them all."""
        if self._closed:
            return
        self._closed = True
        logger.debug("Sending terminate message to all workers")
        for _ in self._workers:
            self._jobs.put(_TERMINATE)
        for worker in self._workers:
            logger.debug("Shutting down worker %d", worker.worker_id)
            worker.join()

    def alive_count(self) -> int:
        """Number of worker threads still running."""
        return sum(1 for worker in self._workers if worker.is_alive())

    def __enter__(self) -> 'ThreadPool':
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.shutdown()
        return False
