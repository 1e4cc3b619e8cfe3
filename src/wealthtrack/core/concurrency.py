"""Thread-pool fan-out helpers."""

import math


def batch_timeout(per_call_seconds: float, tasks: int, max_workers: int) -> float:
    """
    Time to wait for `tasks` calls of at most per_call_seconds each.

    Calls beyond max_workers queue behind the running ones, so the batch runs
    in ceil(tasks / max_workers) waves and every wave gets the full per-call
    budget.
    """
    if tasks <= 0:
        return 0.0
    waves = math.ceil(tasks / max(max_workers, 1))
    return per_call_seconds * waves
