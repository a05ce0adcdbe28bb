"""
Worker Pools
============

Single responsibility: Run batch work (preset validation, TRI decoding)
over a bounded thread pool while keeping results in input order.

Threads rather than processes: every validation task reads the same
immutable SliderCatalog, which would otherwise be pickled per task.
"""

import multiprocessing as mp
from multiprocessing.pool import ThreadPool
from typing import Callable, List, Optional, Sequence, TypeVar

from bodymorph.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

TASK_TYPES = ("cpu", "io")


def get_optimal_workers(task_type: str = "cpu") -> int:
    """
    Default worker count for a kind of batch.

    - "cpu": preset validation, one core left free
    - "io": TRI decoding, oversubscribed since reads dominate

    Example:
        >>> get_optimal_workers("cpu")  # 8 cores
        7
        >>> get_optimal_workers("io")
        16
    """
    cores = mp.cpu_count()
    if task_type == "cpu":
        return max(1, cores - 1)
    if task_type == "io":
        return cores * 2
    raise ValueError(f"Unknown task_type '{task_type}', expected one of {TASK_TYPES}")


def create_worker_pool(task_type: str = "cpu", max_workers: Optional[int] = None) -> ThreadPool:
    """
    Create a thread pool sized for ``task_type``, capped at ``max_workers``.

    Example:
        >>> with create_worker_pool("io", max_workers=4) as pool:
        ...     tris = pool.map(read_tri, paths)
    """
    workers = get_optimal_workers(task_type)
    if max_workers is not None:
        workers = max(1, min(workers, max_workers))

    logger.debug(f"Starting {task_type} pool with {workers} threads")
    return ThreadPool(processes=workers)


def run_batch(
    func: Callable[[T], R],
    items: Sequence[T],
    num_workers: int = 1,
    task_type: str = "cpu"
) -> List[R]:
    """
    Apply ``func`` to every item, in input order.

    Runs inline for a single worker or fewer than two items; otherwise the
    items are spread over a pool of at most ``min(num_workers, len(items))``
    threads. Exceptions raised by ``func`` propagate to the caller.
    """
    if num_workers <= 1 or len(items) < 2:
        return [func(item) for item in items]

    with create_worker_pool(task_type, max_workers=min(num_workers, len(items))) as pool:
        return pool.map(func, items)
