"""
Worker Pool Helpers
===================

Per-file hashing is embarrassingly parallel. These helpers spread it over
daemon worker threads (so an abandoned analysis never keeps the process
alive) and always hand results back in input order, which the grouping
passes rely on for deterministic output.
"""

import logging
import queue
import threading
from concurrent.futures import Executor, Future
from typing import Callable, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class DaemonThreadPoolExecutor(Executor):
    """
    A ThreadPoolExecutor-like class whose worker threads are daemons.

    Implements the subset of the concurrent.futures.Executor interface the
    engine needs: submit, map (ordered), shutdown and context management.
    """
    def __init__(self, max_workers: Optional[int] = None, thread_name_prefix: str = 'DedupWorker'):
        if max_workers is None:
            max_workers = 4
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self._max_workers = max_workers
        self._thread_name_prefix = thread_name_prefix
        self._work_queue: "queue.Queue" = queue.Queue()
        self._threads: List[threading.Thread] = []
        self._shutdown = False
        self._lock = threading.Lock()

    def submit(self, fn, *args, **kwargs) -> Future:
        with self._lock:
            if self._shutdown:
                raise RuntimeError('cannot schedule new futures after shutdown')

            future: Future = Future()
            self._work_queue.put((fn, args, kwargs, future))

            # Start one more worker per submission until the pool is full
            if len(self._threads) < self._max_workers:
                t = threading.Thread(
                    target=self._worker_loop,
                    daemon=True,
                    name=f"{self._thread_name_prefix}-{len(self._threads)}"
                )
                t.start()
                self._threads.append(t)

        return future

    def _worker_loop(self):
        while True:
            item = self._work_queue.get()
            try:
                if item is None:
                    break

                fn, args, kwargs, future = item
                if not future.set_running_or_notify_cancel():
                    continue

                try:
                    future.set_result(fn(*args, **kwargs))
                except BaseException as e:
                    future.set_exception(e)
            finally:
                self._work_queue.task_done()

    def shutdown(self, wait=True, *, cancel_futures=False):
        with self._lock:
            self._shutdown = True
            threads = list(self._threads)

        if cancel_futures:
            while True:
                try:
                    item = self._work_queue.get_nowait()
                except queue.Empty:
                    break
                if item is not None:
                    item[3].cancel()
                self._work_queue.task_done()

        # One sentinel per worker
        for _ in threads:
            self._work_queue.put(None)

        if wait:
            for t in threads:
                t.join()

    def map(self, fn, *iterables, timeout=None, chunksize=1):
        """
        Returns an iterator equivalent to map(fn, *iterables), yielding
        results in submission order.
        """
        if timeout is not None:
            raise NotImplementedError("timeout not supported in DaemonThreadPoolExecutor.map")

        futures = [self.submit(fn, *args) for args in zip(*iterables)]
        for f in futures:
            yield f.result()

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Drop queued work if the block is unwinding because of an error
        self.shutdown(wait=True, cancel_futures=exc_type is not None)
        return False


def map_in_order(fn: Callable[[T], R], items: Iterable[T], max_workers: int = 1) -> List[R]:
    """
    Apply `fn` to every item and return the results in input order.

    With max_workers <= 1 (or fewer than two items) everything runs on the
    calling thread.
    """
    items = list(items)
    if max_workers <= 1 or len(items) < 2:
        return [fn(item) for item in items]

    workers = min(max_workers, len(items))
    logger.debug(f"Running {len(items)} tasks on {workers} worker threads")
    with DaemonThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(fn, items))
