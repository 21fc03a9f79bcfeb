from __future__ import annotations

from datetime import timedelta
from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

from .durations import format_datetime, format_duration, utcnow
from .downtime import duration_ms
from .forms import Cancelled, DialogResult, DowntimeForm, JobForm, Submitted
from .models import DEFAULT_LABEL, JobReport, Machine, StoredReport
from .reports import email_subject, mailto_link, render_report_text
from .state import AppState, SearchResult
from .ticker import ElapsedTicker

STATUS_COLOR = {
    "Idle": "#95a5a6",
    "Running": "#2ecc71",
    "Down": "#f1c40f",
}

STATUS_ICON = {
    "Idle": "⚪",
    "Running": "🟢",
    "Down": "🟡",
}

SEARCH_FIELDS = {
    "job.wrNumber": "WR Number",
    "job.jobName": "Job Name",
    "machineName": "Machine Name",
}


# ============================
# Dialog results
# ============================
def apply_add_job(state: AppState, machine_id: int, result: DialogResult) -> None:
    if isinstance(result, Submitted):
        form: JobForm = result.data
        job = form.to_job(state.get(machine_id).jobs, utcnow())
        state.add_job(machine_id, job)
    st.session_state.pop("dialog", None)
    st.rerun()


def apply_downtime(state: AppState, machine_id: int, result: DialogResult) -> None:
    if isinstance(result, Submitted):
        form: DowntimeForm = result.data
        state.report_downtime(machine_id, form.description)
    st.session_state.pop("dialog", None)
    st.rerun()


def apply_complete(state: AppState, machine_id: int, job_id: int, result: DialogResult) -> None:
    if isinstance(result, Submitted):
        res = state.complete_job(machine_id, job_id)
        ticker: Optional[ElapsedTicker] = st.session_state.tickers.get(machine_id)
        if ticker is not None:
            ticker.sync(res.machine.start_time)
        st.session_state.report_to_show = res.report
        st.session_state.persist_error = res.persist_error
    st.session_state.pop("dialog", None)
    st.rerun()


# ============================
# Dialogs
# ============================
@st.dialog("Add Job")
def add_job_dialog(state: AppState, machine_id: int) -> None:
    with st.form("add_job_form"):
        wr_number = st.text_input("WR Number", placeholder="e.g., WR-7890")
        job_name = st.text_input("Job Name", placeholder="e.g., Main Assembly")
        crate_count = st.number_input("Number of Crates", min_value=0, value=0, step=1)
        c1, c2 = st.columns(2)
        submit = c1.form_submit_button("Add Job", use_container_width=True)
        cancel = c2.form_submit_button("Cancel", use_container_width=True)

    if submit:
        apply_add_job(
            state,
            machine_id,
            Submitted(JobForm(wr_number=wr_number, job_name=job_name, crate_count=int(crate_count))),
        )
    elif cancel:
        apply_add_job(state, machine_id, Cancelled())


@st.dialog("Report Downtime")
def downtime_dialog(state: AppState, machine_id: int) -> None:
    st.write("Please enter a reason for the machine downtime.")
    with st.form("downtime_form"):
        description = st.text_area("Reason", placeholder="e.g., Tool change, material jam, maintenance...")
        c1, c2 = st.columns(2)
        submit = c1.form_submit_button("Submit", use_container_width=True)
        cancel = c2.form_submit_button("Cancel", use_container_width=True)

    if submit:
        apply_downtime(state, machine_id, Submitted(DowntimeForm(description=description)))
    elif cancel:
        apply_downtime(state, machine_id, Cancelled())


@st.dialog("Are you sure?")
def confirm_complete_dialog(state: AppState, machine_id: int, job_id: int) -> None:
    st.write("Do you want to mark this job as complete? This action cannot be undone.")
    c1, c2 = st.columns(2)
    if c1.button("Yes, Complete", type="primary", use_container_width=True):
        apply_complete(state, machine_id, job_id, Submitted(job_id))
    if c2.button("No, Cancel", use_container_width=True):
        apply_complete(state, machine_id, job_id, Cancelled())


@st.dialog("Job Completion Report", width="large")
def report_dialog(report: JobReport) -> None:
    render_report(report)
    c1, c2 = st.columns(2)
    c1.link_button("Email Report", mailto_link(report), use_container_width=True)
    c2.download_button(
        "Download .txt",
        data=render_report_text(report),
        file_name=f"{email_subject(report)}.txt",
        use_container_width=True,
    )


# ============================
# Report view
# ============================
def render_report(report: JobReport) -> None:
    c1, c2 = st.columns(2)
    c1.metric("Machine", report.machine_name)
    c2.metric("Job Name", report.job.job_name or DEFAULT_LABEL)
    c1.metric("WR Number", report.job.wr_number or DEFAULT_LABEL)
    c2.metric("Number of Crates", report.job.crate_count or 0)
    c1.metric("Job Started", format_datetime(report.start_time))
    c2.metric("Job Completed", format_datetime(report.finish_time))
    c1.metric("Total Production Time", report.total_production_time)
    c2.metric("Total Downtime", report.total_downtime)

    st.subheader("Downtime Log")
    if not report.downtime_logs:
        st.caption("No downtime recorded for this job.")
        return

    rows = [
        {
            "From": format_datetime(log.down_at),
            "To": format_datetime(log.up_at),
            "Duration": format_duration(duration_ms(log)),
            "Reason": log.description,
        }
        for log in report.downtime_logs
    ]
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


# ============================
# Machine cards
# ============================
def _ticker_for(machine: Machine, interval_s: float) -> ElapsedTicker:
    tickers: Dict[int, ElapsedTicker] = st.session_state.tickers
    if machine.id not in tickers:
        tickers[machine.id] = ElapsedTicker(interval_s=interval_s)
    ticker = tickers[machine.id]
    ticker.sync(machine.start_time)
    return ticker


def render_running_timer(ticker: ElapsedTicker, interval_s: float) -> None:
    @st.fragment(run_every=timedelta(seconds=interval_s))
    def _timer():
        elapsed = ticker.tick()
        if elapsed is not None:
            st.markdown(f"⏱ **{format_duration(elapsed)}**")

    _timer()


def render_machine_card(state: AppState, machine: Machine, interval_s: float = 1.0) -> None:
    color = STATUS_COLOR.get(machine.status, "#95a5a6")
    with st.container(border=True):
        st.markdown(
            f"<div style='display:flex; justify-content:space-between;'>"
            f"<b>{machine.name}</b>"
            f"<span style='background:{color}; border-radius:8px; padding:0 8px;'>{STATUS_ICON.get(machine.status, '')} {machine.status}</span>"
            f"</div>",
            unsafe_allow_html=True,
        )

        if not machine.jobs:
            st.caption("No jobs active.")
        for job in machine.jobs:
            c1, c2 = st.columns([3, 1])
            c1.markdown(f"**{job.job_name}**  \nWR #: {job.wr_number} • Crates: {job.crate_count}")
            if c2.button("End Job", key=f"end_{machine.id}_{job.job_id}"):
                st.session_state.dialog = ("complete", machine.id, job.job_id)
                st.rerun()

        ticker = _ticker_for(machine, interval_s)
        if machine.status != "Idle":
            render_running_timer(ticker, interval_s)

        if st.button("Add Job", key=f"add_{machine.id}", use_container_width=True):
            st.session_state.dialog = ("add_job", machine.id, None)
            st.rerun()

        if machine.status == "Idle" and machine.jobs:
            if st.button("Start Machine", key=f"start_{machine.id}", use_container_width=True):
                state.start_machine(machine.id)
                st.rerun()

        if machine.status == "Running":
            if st.button("Report Downtime", key=f"down_{machine.id}", use_container_width=True):
                st.session_state.dialog = ("downtime", machine.id, None)
                st.rerun()

        if machine.status == "Down":
            if st.button("Resume Production", key=f"resume_{machine.id}", use_container_width=True):
                state.resume_production(machine.id)
                st.rerun()


def render_machine_grid(state: AppState, machines: List[Machine], per_row: int = 4, interval_s: float = 1.0) -> None:
    for i in range(0, len(machines), per_row):
        cols = st.columns(per_row)
        for col, m in zip(cols, machines[i : i + per_row]):
            with col:
                render_machine_card(state, m, interval_s)


# ============================
# Search
# ============================
def render_search_results(result: SearchResult, searched_value: str) -> Optional[StoredReport]:
    if not result.ok:
        st.error(result.error)
        return None

    if not result.reports:
        st.info(
            "No results found for your search."
            if searched_value.strip()
            else "There are no completed jobs in the database yet."
        )
        return None

    for r in result.reports:
        label = f"📄 {r.job.job_name} • {r.machine_name} • WR: {r.job.wr_number} • {format_datetime(r.finish_time)}"
        if st.button(label, key=f"view_{r.id}", use_container_width=True):
            return r
    return None
