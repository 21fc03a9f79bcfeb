"""
Entry-point validation for dialog input, and the result types dialogs return.

A dialog resolves to either Submitted(data) or Cancelled(); the caller
matches on the type instead of wiring callbacks into UI state.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Generic, Sequence, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .job_queue import next_job_id
from .models import DEFAULT_DOWNTIME_REASON, DEFAULT_LABEL, Job

T = TypeVar("T")


@dataclass(frozen=True)
class Submitted(Generic[T]):
    data: T


@dataclass(frozen=True)
class Cancelled:
    pass


DialogResult = Union[Submitted[T], Cancelled]


class JobForm(BaseModel):
    model_config = ConfigDict(validate_default=True)

    wr_number: str = ""
    job_name: str = ""
    crate_count: int = Field(0, ge=0)

    @field_validator("wr_number", "job_name")
    @classmethod
    def _blank_to_na(cls, v: str) -> str:
        return v.strip() or DEFAULT_LABEL

    def to_job(self, queued: Sequence[Job], now: datetime) -> Job:
        return Job(
            job_id=next_job_id(queued, now),
            wr_number=self.wr_number,
            job_name=self.job_name,
            crate_count=self.crate_count,
        )


class DowntimeForm(BaseModel):
    model_config = ConfigDict(validate_default=True)

    description: str = ""

    @field_validator("description")
    @classmethod
    def _default_reason(cls, v: str) -> str:
        return v.strip() or DEFAULT_DOWNTIME_REASON
