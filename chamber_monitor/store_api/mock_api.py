from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException

from ..models import JobReport, QueryField
from ..providers.base import field_value

app = FastAPI(title="Completed Jobs Store", version="0.1")

STORE: Dict[str, Dict[str, Any]] = {}  # id -> report document


@app.get("/health")
def health():
    return {"ok": True, "ts": datetime.now().isoformat(timespec="seconds")}


@app.post("/api/v1/completed_jobs")
def create_report(report: JobReport):
    doc_id = uuid4().hex
    received_at = datetime.now().isoformat(timespec="seconds")

    STORE[doc_id] = report.model_dump(mode="json")
    return {"ok": True, "id": doc_id, "received_at": received_at}


@app.get("/api/v1/completed_jobs")
def list_reports(field: Optional[QueryField] = None, value: Optional[str] = None):
    # no ordering guarantee: clients sort by finish_time themselves
    if field is None:
        items = [{**doc, "id": doc_id} for doc_id, doc in STORE.items()]
    else:
        if value is None:
            raise HTTPException(status_code=422, detail="value is required with field")
        items = [
            {**doc, "id": doc_id}
            for doc_id, doc in STORE.items()
            if field_value(doc, field) == value
        ]
    return {"count": len(items), "items": items}


@app.get("/api/v1/completed_jobs/{doc_id}")
def get_report(doc_id: str):
    doc = STORE.get(doc_id)
    if not doc:
        raise HTTPException(status_code=404, detail="report not found")
    return {**doc, "id": doc_id}


@app.get("/")
def root():
    return {
        "service": "Completed Jobs Store",
        "ok": True,
        "endpoints": ["/health", "/api/v1/completed_jobs"],
    }
