"""Utility functions and helpers.

Logging and worker pools shared by the pipeline and CLI.
"""

from .logging import setup_logger, get_logger
from .parallel import create_worker_pool, get_optimal_workers, run_batch

__all__ = ["setup_logger", "get_logger", "create_worker_pool", "get_optimal_workers", "run_batch"]
