from __future__ import annotations
from typing import Any, Dict, List
from uuid import uuid4

from .base import JobStore, field_value
from ..models import JobReport, StoredReport


class MemoryJobStore(JobStore):
    """In-process store; documents are kept as plain dicts, like a document DB."""

    def __init__(self) -> None:
        self._docs: Dict[str, Dict[str, Any]] = {}

    def create(self, report: JobReport) -> str:
        doc_id = uuid4().hex
        self._docs[doc_id] = report.model_dump(mode="json")
        return doc_id

    def query_by(self, field: str, value: str) -> List[StoredReport]:
        return [
            StoredReport.model_validate({**doc, "id": doc_id})
            for doc_id, doc in self._docs.items()
            if field_value(doc, field) == value
        ]

    def list_all(self) -> List[StoredReport]:
        return [StoredReport.model_validate({**doc, "id": doc_id}) for doc_id, doc in self._docs.items()]
