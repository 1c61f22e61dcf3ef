"""Fan-out of independent per-sample tasks."""

import multiprocessing
import os
from concurrent.futures import ProcessPoolExecutor
from typing import Any, Callable, List, Optional, Sequence, Tuple

from tqdm import tqdm


class SampleProcessingError(RuntimeError):
    """A per-sample task failed; ``sample`` names the offending sample."""

    def __init__(self, sample: str, mutation_type: Optional[str] = None, reason: str = ""):
        self.sample = sample
        self.mutation_type = mutation_type
        self.reason = reason
        where = f"sample '{sample}'" if mutation_type is None else f"sample '{sample}' ({mutation_type})"
        super().__init__(f"Failed to process {where}: {reason}")

    def __reduce__(self):
        return (type(self), (self.sample, self.mutation_type, self.reason))


def available_parallelism() -> int:
    """
    Number of worker processes to use when none is requested.

    Uses the CPUs this process may run on. Falls back to 1 on platforms
    without the 'fork' start method or when the CPU count is unknown.
    """
    if "fork" not in multiprocessing.get_all_start_methods():
        return 1
    if hasattr(os, "sched_getaffinity"):
        n_cpus = len(os.sched_getaffinity(0))
    else:
        n_cpus = os.cpu_count()
    return n_cpus or 1


def resolve_n_jobs(n_jobs: Optional[int]) -> int:
    """Validate a requested degree of parallelism, autodetecting when None."""
    if n_jobs is None:
        return available_parallelism()
    if isinstance(n_jobs, bool) or not isinstance(n_jobs, int) or n_jobs < 1:
        raise ValueError(f"n_jobs must be a positive integer or None, got {n_jobs!r}")
    return n_jobs


def map_samples(
    func: Callable[..., Any],
    tasks: Sequence[Tuple[str, tuple]],
    n_jobs: int = 1,
    mutation_type: Optional[str] = None,
    show_progress: bool = False,
    desc: str = "Processing samples"
) -> List[Any]:
    """
    Apply ``func(*args)`` to every ``(sample, args)`` task.

    Results are returned in task order regardless of completion order. The
    first failing task aborts the run: pending tasks are cancelled and a
    SampleProcessingError naming the sample is raised from the original error.

    Parameters
    ----------
    func : callable
        Module-level function (it is pickled to worker processes)
    tasks : sequence of (str, tuple)
        Sample name and positional arguments for each task
    n_jobs : int, default 1
        Number of worker processes; 1 runs the tasks in this process
    mutation_type : str, optional
        Reported in errors
    show_progress : bool, default False
        Show progress bar
    desc : str
        Progress bar description
    """
    n_workers = min(n_jobs, len(tasks))

    if n_workers <= 1:
        results = []
        iterator = tqdm(tasks, desc=desc, unit="sample") if show_progress else tasks
        for sample, args in iterator:
            try:
                results.append(func(*args))
            except Exception as e:
                raise SampleProcessingError(sample, mutation_type, str(e)) from e
        return results

    results = []
    executor = ProcessPoolExecutor(max_workers=n_workers)
    try:
        futures = [(sample, executor.submit(func, *args)) for sample, args in tasks]
        iterator = tqdm(futures, desc=desc, unit="sample") if show_progress else futures
        for sample, future in iterator:
            try:
                results.append(future.result())
            except Exception as e:
                executor.shutdown(wait=False, cancel_futures=True)
                raise SampleProcessingError(sample, mutation_type, str(e)) from e
    finally:
        executor.shutdown(wait=True)
    return results
