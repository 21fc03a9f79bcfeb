"""
Machine lifecycle state machine.

  Idle --start_machine--> Running --report_downtime--> Down
  Down --resume_production--> Running
  Running/Down --complete_job (last job)--> Idle

Every transition is a pure function: it takes a Machine and returns a new
one. A call whose precondition does not hold returns the machine unchanged
instead of raising; callers present only valid actions, but spurious
invocations must be harmless.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Tuple

from . import downtime, job_queue
from .durations import utcnow
from .models import Job, JobReport, Machine
from .reports import generate_report

log = logging.getLogger(__name__)


def add_job(machine: Machine, job: Job) -> Machine:
    # backlog may grow in any state; status and timers stay as they are
    return machine.model_copy(update={"jobs": job_queue.enqueue(machine.jobs, job)})


def start_machine(machine: Machine, now: Optional[datetime] = None) -> Machine:
    if machine.status != "Idle" or job_queue.is_empty(machine.jobs):
        log.debug("start ignored: machine=%s status=%s jobs=%d", machine.id, machine.status, len(machine.jobs))
        return machine

    return machine.model_copy(
        update={
            "status": "Running",
            "start_time": now or utcnow(),
            "downtime_log": [],
            "open_downtime": None,
        }
    )


def report_downtime(machine: Machine, reason: str, now: Optional[datetime] = None) -> Machine:
    if machine.status != "Running":
        log.debug("downtime ignored: machine=%s status=%s", machine.id, machine.status)
        return machine

    return machine.model_copy(
        update={
            "status": "Down",
            "open_downtime": downtime.open_interval(reason, now or utcnow()),
        }
    )


def resume_production(machine: Machine, now: Optional[datetime] = None) -> Machine:
    if machine.status != "Down":
        log.debug("resume ignored: machine=%s status=%s", machine.id, machine.status)
        return machine

    new_log, open_downtime = downtime.close(machine.downtime_log, machine.open_downtime, now or utcnow())
    return machine.model_copy(
        update={
            "status": "Running",
            "downtime_log": new_log,
            "open_downtime": open_downtime,
        }
    )


def reset(machine: Machine) -> Machine:
    return machine.model_copy(
        update={
            "status": "Idle",
            "jobs": [],
            "start_time": None,
            "downtime_log": [],
            "open_downtime": None,
        }
    )


def complete_job(
    machine: Machine,
    job_id: int,
    now: Optional[datetime] = None,
) -> Tuple[Machine, Optional[JobReport]]:
    """
    Report on job_id, then drop it from the queue.

    The last job of a run resets the machine to Idle. Otherwise only the queue
    changes, so downtime logged earlier in the run also appears in the
    reports of the jobs completed after it.
    """
    job = job_queue.find(machine.jobs, job_id)
    if job is None:
        log.debug("complete ignored: machine=%s has no job %s", machine.id, job_id)
        return machine, None

    report = generate_report(machine, job, now or utcnow())

    remaining = job_queue.remove(machine.jobs, job_id)
    if job_queue.is_empty(remaining):
        return reset(machine), report
    return machine.model_copy(update={"jobs": remaining}), report
