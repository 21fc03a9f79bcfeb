from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Literal
from datetime import datetime

MachineStatus = Literal["Idle", "Running", "Down"]
QueryField = Literal["job.wrNumber", "job.jobName", "machineName"]

DEFAULT_LABEL = "N/A"
DEFAULT_DOWNTIME_REASON = "No description provided."


class Job(BaseModel):
    model_config = ConfigDict(frozen=True)

    job_id: int
    wr_number: str = DEFAULT_LABEL
    job_name: str = DEFAULT_LABEL
    crate_count: int = 0


class DowntimeInterval(BaseModel):
    model_config = ConfigDict(frozen=True)

    down_at: datetime
    up_at: datetime
    description: str = DEFAULT_DOWNTIME_REASON


class OpenDowntime(BaseModel):
    model_config = ConfigDict(frozen=True)

    down_at: datetime
    description: str = DEFAULT_DOWNTIME_REASON


class Machine(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    status: MachineStatus = "Idle"

    # queue order == insertion order
    jobs: List[Job] = Field(default_factory=list)

    # Running/Down
    start_time: Optional[datetime] = None
    downtime_log: List[DowntimeInterval] = Field(default_factory=list)
    open_downtime: Optional[OpenDowntime] = None


class JobReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    machine_name: str
    job: Job
    start_time: datetime
    finish_time: datetime
    downtime_logs: List[DowntimeInterval] = Field(default_factory=list)
    total_production_time: str
    total_downtime: str


class StoredReport(JobReport):
    """A report as read back from a store, carrying the store-assigned id."""

    id: str
