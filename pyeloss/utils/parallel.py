"""
Worker-count helper for parallel batch scans.

This module provides :func:`optimal_worker_count`, which sizes a process pool
from the number of tasks and the available CPU cores. At least one worker is
always returned and one core is kept free when the workload is large.

Used by :meth:`~pyeloss.chamber.core.DetectorSetup.scan` in parallel mode.
"""

import os
import warnings


def optimal_worker_count(workload, user_requested: int = None) -> int:
    """
    Determine how many worker processes to start for a batch of tasks.

    Small workloads get one worker per task; larger ones are capped at CPU-1.
    A user-requested count is honoured unless it exceeds that cap.

    :param workload: The tasks to process, as an iterable or a task count.
    :type workload: iterable or int
    :param user_requested: Optional user-defined number of workers.
    :type user_requested: int or None

    :returns: Number of worker processes (always at least 1).
    :rtype: int
    """
    num_cores = os.cpu_count() or 1
    max_workers = max(1, num_cores - 1)

    size = len(workload) if hasattr(workload, '__len__') else int(workload)

    if size == 0:
        return 1

    if user_requested is not None:
        capped = max(1, min(user_requested, max_workers, size))
        if user_requested > max_workers:
            warnings.warn(
                f"Requested {user_requested} workers, but only {max_workers} allowed based on CPU count. "
                f"Using {capped} workers instead."
            )
        return capped

    return min(size, max_workers)
