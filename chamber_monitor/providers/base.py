from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List, get_args

from ..models import JobReport, QueryField, StoredReport

QUERY_FIELDS = get_args(QueryField)


class StoreError(Exception):
    """Store unreachable, write rejected or query failed."""


def field_value(doc: Dict[str, Any], field: str) -> Any:
    # "job.wrNumber" -> doc["job"]["wr_number"]
    path = {
        "job.wrNumber": ("job", "wr_number"),
        "job.jobName": ("job", "job_name"),
        "machineName": ("machine_name",),
    }.get(field)
    if path is None:
        raise ValueError(f"Unknown query field: {field}. Allowed: {', '.join(QUERY_FIELDS)}")

    value: Any = doc
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


class JobStore(ABC):
    @abstractmethod
    def create(self, report: JobReport) -> str:
        ...

    @abstractmethod
    def query_by(self, field: str, value: str) -> List[StoredReport]:
        ...

    @abstractmethod
    def list_all(self) -> List[StoredReport]:
        ...
