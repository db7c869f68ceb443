"""Worker pool that fans backup items out to concurrent workers.

A fixed number of workers drain one shared queue. Every item is taken by
exactly one worker, and ``dispatch`` returns once all of them are done.
No ordering is guaranteed between items.
"""

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Optional, Sequence

from ..config import ItemConfig
from .executor import ItemResult, ItemStatus

logger = logging.getLogger(__name__)

RunItem = Callable[[ItemConfig, int], ItemResult]
ResultCallback = Callable[[ItemResult], None]


def dispatch(
    items: Sequence[ItemConfig],
    jobs: int,
    run_item: RunItem,
    on_result: Optional[ResultCallback] = None,
) -> list[ItemResult]:
    """Run ``run_item`` for every item on ``jobs`` concurrent workers.

    Args:
        items: Items to process
        jobs: Number of workers, numbered from 1
        run_item: Called as ``run_item(item, worker_id)`` for each item
        on_result: Called from the worker thread with every result

    Returns:
        One result per item, in completion order
    """
    if jobs < 1:
        raise ValueError(f"jobs must be at least 1, got {jobs}")

    work: queue.Queue[ItemConfig] = queue.Queue()
    for item in items:
        work.put(item)

    results: list[ItemResult] = []
    results_lock = threading.Lock()

    def report(result: ItemResult) -> None:
        with results_lock:
            results.append(result)
        if on_result is not None:
            try:
                on_result(result)
            except Exception as e:
                logger.error("Reporting result for %s failed: %s", result.label, e)

    def worker(worker_id: int) -> None:
        while True:
            try:
                item = work.get_nowait()
            except queue.Empty:
                return
            logger.debug("Worker %d picked up %s", worker_id, item.label)
            try:
                result = run_item(item, worker_id)
            except Exception as e:
                logger.debug("Unhandled error for %s", item.label, exc_info=True)
                result = ItemResult(
                    label=item.label,
                    source=item.path,
                    status=ItemStatus.EXECUTION_FAILED,
                    worker_id=worker_id,
                    message=f"Unexpected error: {e}",
                )
            report(result)

    with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="worker") as executor:
        futures = [executor.submit(worker, worker_id) for worker_id in range(1, jobs + 1)]
        wait(futures)

    # Workers catch everything per item, so this only surfaces bugs
    for future in futures:
        future.result()

    return results
