from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from .models import Job


def enqueue(jobs: Sequence[Job], job: Job) -> List[Job]:
    return [*jobs, job]


def remove(jobs: Sequence[Job], job_id: int) -> List[Job]:
    """Drop the first job with this id; unchanged copy if it is not queued."""
    out = list(jobs)
    for i, j in enumerate(out):
        if j.job_id == job_id:
            del out[i]
            break
    return out


def find(jobs: Sequence[Job], job_id: int) -> Optional[Job]:
    return next((j for j in jobs if j.job_id == job_id), None)


def is_empty(jobs: Sequence[Job]) -> bool:
    return len(jobs) == 0


def next_job_id(jobs: Sequence[Job], now: datetime) -> int:
    # epoch ms of the creation instant, bumped past any id already queued
    job_id = int(now.timestamp() * 1000)
    taken = {j.job_id for j in jobs}
    while job_id in taken:
        job_id += 1
    return job_id
