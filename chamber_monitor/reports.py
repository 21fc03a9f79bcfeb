from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from urllib.parse import quote

from .downtime import closing_entry, duration_ms, total_downtime_ms
from .durations import format_datetime, format_duration, span_ms, utcnow
from .models import DEFAULT_LABEL, DowntimeInterval, Job, JobReport, Machine

RULE_HEAVY = "=" * 36
RULE_LIGHT = "-" * 36
NO_DOWNTIME_LINE = "No downtime recorded for this job."


def effective_downtime_logs(machine: Machine, finish_time: datetime) -> List[DowntimeInterval]:
    """Closed log plus a synthetic closing entry when the machine is still Down."""
    logs = list(machine.downtime_log)
    if machine.status == "Down" and machine.open_downtime is not None:
        logs.append(closing_entry(machine.open_downtime, finish_time))
    return logs


def generate_report(machine: Machine, job: Job, now: Optional[datetime] = None) -> JobReport:
    """
    Snapshot of one completed job against the machine's current run.

    Machine state is not mutated: an open downtime interval is closed only in
    the report. A job completed on a machine that was never started reports a
    zero-length run (start_time == finish_time).
    """
    finish_time = now or utcnow()
    start_time = machine.start_time or finish_time

    logs = effective_downtime_logs(machine, finish_time)
    downtime_ms = total_downtime_ms(logs)
    duration = span_ms(start_time, finish_time)
    production_ms = max(0, duration - downtime_ms)

    return JobReport(
        machine_name=machine.name,
        job=job.model_copy(),
        start_time=start_time,
        finish_time=finish_time,
        downtime_logs=logs,
        total_production_time=format_duration(production_ms),
        total_downtime=format_duration(downtime_ms),
    )


def render_report_text(report: JobReport) -> str:
    job = report.job
    lines = [
        "JOB COMPLETION REPORT",
        RULE_HEAVY,
        "",
        "JOB DETAILS",
        RULE_LIGHT,
        f"Machine:      {report.machine_name}",
        f"Job Name:     {job.job_name or DEFAULT_LABEL}",
        f"WR Number:    {job.wr_number or DEFAULT_LABEL}",
        f"Crates:       {job.crate_count or 0}",
        "",
        "TIMELINE",
        RULE_LIGHT,
        f"Job Started:   {format_datetime(report.start_time)}",
        f"Job Completed: {format_datetime(report.finish_time)}",
        "",
        "SUMMARY",
        RULE_LIGHT,
        f"Total Production Time: {report.total_production_time}",
        f"Total Downtime:        {report.total_downtime}",
        "",
        "DOWNTIME LOG",
        RULE_LIGHT,
    ]

    if not report.downtime_logs:
        lines.append(NO_DOWNTIME_LINE)
    else:
        for n, log in enumerate(report.downtime_logs, start=1):
            lines += [
                f"Event {n}:",
                f"  From:     {format_datetime(log.down_at)}",
                f"  To:       {format_datetime(log.up_at)}",
                f"  Duration: {format_duration(duration_ms(log))}",
                f"  Reason:   {log.description or DEFAULT_LABEL}",
                "",
            ]

    return "\n".join(lines) + "\n"


def email_subject(report: JobReport) -> str:
    return f"Job Report: {report.job.job_name} (WR: {report.job.wr_number})"


def mailto_link(report: JobReport) -> str:
    subject = quote(email_subject(report), safe="!~*'()")
    body = quote(render_report_text(report), safe="!~*'()")
    return f"mailto:?subject={subject}&body={body}"
