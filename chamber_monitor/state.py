"""
Application state and command handlers.

AppState holds the live machines and the report store. The UI keeps one
instance (in st.session_state) and passes it to every handler; handlers
replace a machine with the new value returned by the transition functions in
machine.py.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from . import machine as transitions
from .durations import utcnow
from .models import Job, JobReport, Machine, StoredReport
from .providers.base import QUERY_FIELDS, JobStore, StoreError

log = logging.getLogger(__name__)

# shop fleet used when config has no machines list
DEFAULT_MACHINE_NAMES = [
    "Vallet 1",
    "McKenzie 5",
    "Vallet 2",
    "Jerone 1",
    "Jerone 2",
    "JBB",
    "Robson",
    "Autec",
]

STORE_NOT_CONNECTED = "Database not connected. Please wait and try again."


@dataclass
class CompletionResult:
    machine: Machine
    report: Optional[JobReport]
    store_id: Optional[str] = None
    persist_error: Optional[str] = None


@dataclass
class SearchResult:
    reports: List[StoredReport] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def machines_from_config(cfg: dict) -> List[Machine]:
    entries = cfg.get("machines") or [
        {"id": i, "name": name} for i, name in enumerate(DEFAULT_MACHINE_NAMES, start=1)
    ]
    return [Machine(id=int(e["id"]), name=str(e["name"])) for e in entries]


def sort_newest_first(reports: List[StoredReport]) -> List[StoredReport]:
    return sorted(reports, key=lambda r: r.finish_time, reverse=True)


class AppState:
    def __init__(self, machines: List[Machine], store: Optional[JobStore] = None):
        self._machines: Dict[int, Machine] = {m.id: m for m in machines}
        self.store = store

    @classmethod
    def from_config(cls, cfg: dict, store: Optional[JobStore] = None) -> "AppState":
        return cls(machines_from_config(cfg), store)

    @property
    def machines(self) -> List[Machine]:
        return list(self._machines.values())

    def get(self, machine_id: int) -> Machine:
        # unknown id is a caller bug, not a precondition violation
        return self._machines[machine_id]

    def _put(self, m: Machine) -> Machine:
        self._machines[m.id] = m
        return m

    # ---- commands ----
    def add_job(self, machine_id: int, job: Job) -> Machine:
        m = self._put(transitions.add_job(self.get(machine_id), job))
        log.info("job queued: machine=%s job=%s wr=%s", m.name, job.job_id, job.wr_number)
        return m

    def start_machine(self, machine_id: int, now: Optional[datetime] = None) -> Machine:
        return self._put(transitions.start_machine(self.get(machine_id), now))

    def report_downtime(self, machine_id: int, reason: str, now: Optional[datetime] = None) -> Machine:
        return self._put(transitions.report_downtime(self.get(machine_id), reason, now))

    def resume_production(self, machine_id: int, now: Optional[datetime] = None) -> Machine:
        return self._put(transitions.resume_production(self.get(machine_id), now))

    def complete_job(self, machine_id: int, job_id: int, now: Optional[datetime] = None) -> CompletionResult:
        """
        Complete a job and hand its report to the store.

        The in-memory transition is committed before persisting; a store
        failure is logged and returned in persist_error, never retried and
        never rolled back.
        """
        updated, report = transitions.complete_job(self.get(machine_id), job_id, now or utcnow())
        self._put(updated)
        result = CompletionResult(machine=updated, report=report)
        if report is None:
            return result

        log.info(
            "job completed: machine=%s job=%s production=%s downtime=%s",
            report.machine_name, report.job.job_id, report.total_production_time, report.total_downtime,
        )

        if self.store is None:
            log.warning("store not configured, report not saved: machine=%s job=%s", report.machine_name, job_id)
            result.persist_error = STORE_NOT_CONNECTED
            return result

        try:
            result.store_id = self.store.create(report)
        except StoreError as e:
            log.warning("error saving report to store: %s", e)
            result.persist_error = str(e)
        return result

    # ---- search ----
    def search(self, field: str, value: str) -> SearchResult:
        """Exact-match search; a blank value lists every report. Newest first."""
        if field not in QUERY_FIELDS:
            raise ValueError(f"Unknown query field: {field}")
        if self.store is None:
            return SearchResult(error=STORE_NOT_CONNECTED)

        value = value.strip()
        try:
            reports = self.store.query_by(field, value) if value else self.store.list_all()
        except StoreError as e:
            log.warning("search failed: field=%s value=%r: %s", field, value, e)
            return SearchResult(error=str(e))

        return SearchResult(reports=sort_newest_first(reports))
