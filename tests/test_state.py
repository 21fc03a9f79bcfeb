from typing import List

import pytest
from google.auth.exceptions import TransportError

from chamber_monitor.models import JobReport, StoredReport
from chamber_monitor.providers import MemoryJobStore
from chamber_monitor.providers import http_store
from chamber_monitor.providers.base import JobStore, StoreError
from chamber_monitor.providers.http_store import HttpJobStore
from chamber_monitor.providers.sheets_store import SheetsJobStore
from chamber_monitor.state import (
    DEFAULT_MACHINE_NAMES,
    STORE_NOT_CONNECTED,
    AppState,
    machines_from_config,
)

from conftest import at


class BrokenStore(JobStore):
    def __init__(self):
        self.calls = 0

    def create(self, report: JobReport) -> str:
        self.calls += 1
        raise StoreError("write rejected")

    def query_by(self, field: str, value: str) -> List[StoredReport]:
        raise StoreError("store unreachable")

    def list_all(self) -> List[StoredReport]:
        raise StoreError("store unreachable")


@pytest.fixture
def app_state():
    return AppState.from_config({}, MemoryJobStore())


def _run_one_job(state, job, start, finish, machine_id=1):
    state.add_job(machine_id, job)
    state.start_machine(machine_id, start)
    return state.complete_job(machine_id, job.job_id, finish)


def test_default_fleet():
    machines = machines_from_config({})
    assert [m.name for m in machines] == DEFAULT_MACHINE_NAMES
    assert [m.id for m in machines] == list(range(1, 9))
    assert all(m.status == "Idle" for m in machines)


def test_fleet_from_config():
    machines = machines_from_config({"machines": [{"id": 7, "name": "Robson"}]})
    assert [(m.id, m.name) for m in machines] == [(7, "Robson")]


def test_unknown_machine_raises(app_state, coat_a):
    with pytest.raises(KeyError):
        app_state.add_job(99, coat_a)


def test_commands_update_state(app_state, coat_a):
    m = app_state.add_job(1, coat_a)
    assert app_state.get(1) == m
    app_state.start_machine(1, at(0))
    app_state.report_downtime(1, "Tool change", at(10))
    assert app_state.get(1).status == "Down"
    app_state.resume_production(1, at(15))
    assert app_state.get(1).status == "Running"
    # other machines untouched
    assert app_state.get(2).jobs == []


def test_complete_persists_report(app_state, coat_a):
    res = _run_one_job(app_state, coat_a, at(0), at(20))
    assert res.persist_error is None
    assert res.store_id
    assert res.machine.status == "Idle"
    assert app_state.store.list_all()[0].id == res.store_id


def test_persist_failure_does_not_roll_back(coat_a):
    store = BrokenStore()
    state = AppState.from_config({}, store)
    res = _run_one_job(state, coat_a, at(0), at(20))

    assert res.report is not None
    assert res.persist_error == "write rejected"
    assert store.calls == 1  # never retried
    assert state.get(1).status == "Idle"
    assert state.get(1).jobs == []


def test_complete_without_store(coat_a):
    state = AppState.from_config({}, None)
    res = _run_one_job(state, coat_a, at(0), at(20))
    assert res.report is not None
    assert res.persist_error == STORE_NOT_CONNECTED


def test_complete_unknown_job(app_state, coat_a):
    app_state.add_job(1, coat_a)
    res = app_state.complete_job(1, 42, at(1))
    assert res.report is None
    assert app_state.store.list_all() == []


def test_search_empty_store_is_not_an_error(app_state):
    result = app_state.search("job.wrNumber", "WR-1")
    assert result.ok
    assert result.reports == []


def test_search_unreachable_store_is_an_error():
    result = AppState.from_config({}, BrokenStore()).search("job.wrNumber", "WR-1")
    assert not result.ok
    assert result.error == "store unreachable"
    assert result.reports == []


def test_search_without_store():
    result = AppState.from_config({}, None).search("machineName", "JBB")
    assert result.error == STORE_NOT_CONNECTED


def test_search_sorted_newest_first(app_state, coat_a, coat_b):
    _run_one_job(app_state, coat_a, at(0), at(20))
    _run_one_job(app_state, coat_b, at(30), at(50))
    _run_one_job(app_state, coat_a.model_copy(update={"job_id": 2001}), at(5), at(25), machine_id=2)

    everything = app_state.search("job.wrNumber", "")
    assert [r.finish_time for r in everything.reports] == [at(50), at(25), at(20)]

    by_wr = app_state.search("job.wrNumber", " WR-1 ")
    assert [r.finish_time for r in by_wr.reports] == [at(25), at(20)]

    by_machine = app_state.search("machineName", "McKenzie 5")
    assert [r.job.job_id for r in by_machine.reports] == [2001]


def test_search_rejects_unknown_field(app_state):
    with pytest.raises(ValueError):
        app_state.search("job.crateCount", "5")


class ExpiredTokenWorksheet:
    def get_all_values(self):
        raise TransportError("token refresh failed")

    def append_row(self, values, value_input_option=None):
        raise TransportError("token refresh failed")

    def get_all_records(self):
        raise TransportError("token refresh failed")


def test_sheets_auth_failure_keeps_completion(coat_a):
    state = AppState.from_config({}, SheetsJobStore(ExpiredTokenWorksheet()))
    res = _run_one_job(state, coat_a, at(0), at(20))

    assert res.report is not None
    assert "token refresh failed" in res.persist_error
    assert res.store_id is None
    assert state.get(1).status == "Idle"


def test_sheets_auth_failure_on_search_is_an_error():
    result = AppState.from_config({}, SheetsJobStore(ExpiredTokenWorksheet())).search("machineName", "JBB")
    assert not result.ok
    assert result.reports == []


def test_malformed_http_store_response_is_a_search_error(monkeypatch):
    class Response:
        def raise_for_status(self):
            pass

        def json(self):
            return {"items": [{"id": "x", "machine_name": "JBB"}]}

    monkeypatch.setattr(http_store.requests, "get", lambda *a, **kw: Response())
    result = AppState.from_config({}, HttpJobStore("http://store")).search("machineName", "JBB")

    assert not result.ok
    assert "malformed" in result.error
    assert result.reports == []
