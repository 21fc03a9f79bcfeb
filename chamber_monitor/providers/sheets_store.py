from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List
from uuid import uuid4
import json
import logging

import gspread
import requests
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from pydantic import ValidationError

from .base import JobStore, QUERY_FIELDS, StoreError, field_value
from ..models import JobReport, StoredReport

log = logging.getLogger(__name__)

# transport and auth failures of the sheets client
SHEET_ERRORS = (gspread.exceptions.GSpreadException, requests.RequestException, GoogleAuthError)

HEADER = [
    "id",
    "finish_time",
    "machine_name",
    "wr_number",
    "job_name",
    "crate_count",
    "total_production_time",
    "total_downtime",
    "payload_json",
    "ts_written",
]


def _resolve_path(p: str) -> str:
    pp = Path(p)
    if pp.is_absolute():
        return str(pp)
    base = Path(__file__).resolve().parents[2]  # project root (config/, secrets/, chamber_monitor/)
    return str((base / pp).resolve())


def _ensure_header(ws) -> None:
    if ws.get_all_values() == []:
        ws.append_row(HEADER)


def _open_worksheet(cfg: dict):
    gs_cfg = (cfg.get("store", {}) or {}).get("google_sheets", {}) or {}

    creds_path = gs_cfg.get("credentials_json_path")
    spreadsheet_id = gs_cfg.get("spreadsheet_id")
    worksheet_title = gs_cfg.get("worksheet_title", "completed_jobs")

    if not creds_path or not spreadsheet_id:
        raise ValueError("Google Sheets config missing: credentials_json_path/spreadsheet_id")

    scopes = ["https://www.googleapis.com/auth/spreadsheets"]
    credentials = Credentials.from_service_account_file(_resolve_path(creds_path), scopes=scopes)
    client = gspread.authorize(credentials)

    sh = client.open_by_key(spreadsheet_id)
    try:
        return sh.worksheet(worksheet_title)
    except gspread.WorksheetNotFound:
        return sh.add_worksheet(title=worksheet_title, rows=1000, cols=len(HEADER))


class SheetsJobStore(JobStore):
    """
    One row per completed job. Query columns are flattened for people reading
    the sheet; the full report is kept in payload_json and is what gets read
    back.
    """

    def __init__(self, worksheet) -> None:
        self._ws = worksheet

    @classmethod
    def from_config(cls, cfg: dict) -> "SheetsJobStore":
        return cls(_open_worksheet(cfg))

    def create(self, report: JobReport) -> str:
        doc_id = uuid4().hex
        d = report.model_dump(mode="json")

        row = {
            "id": doc_id,
            "finish_time": d["finish_time"],
            "machine_name": d["machine_name"],
            "wr_number": d["job"]["wr_number"],
            "job_name": d["job"]["job_name"],
            "crate_count": d["job"]["crate_count"],
            "total_production_time": d["total_production_time"],
            "total_downtime": d["total_downtime"],
            "payload_json": json.dumps(d, ensure_ascii=False),
            "ts_written": datetime.now().isoformat(timespec="seconds"),
        }

        try:
            _ensure_header(self._ws)
            self._ws.append_row([row.get(k, "") for k in HEADER], value_input_option="RAW")
        except SHEET_ERRORS as e:
            raise StoreError(f"Could not save report to sheet: {e}") from e

        log.info("report appended to sheet: id=%s machine=%s", doc_id, report.machine_name)
        return doc_id

    def _read_reports(self) -> List[StoredReport]:
        try:
            records = self._ws.get_all_records()
        except SHEET_ERRORS as e:
            raise StoreError(f"Search failed: {e}") from e

        reports = []
        for rec in records:
            payload = rec.get("payload_json")
            if not payload:
                continue
            try:
                doc = {**json.loads(payload), "id": str(rec.get("id"))}
                reports.append(StoredReport.model_validate(doc))
            except (json.JSONDecodeError, TypeError, ValidationError) as e:
                raise StoreError(f"Search failed: malformed row id={rec.get('id')}: {e}") from e
        return reports

    def query_by(self, field: str, value: str) -> List[StoredReport]:
        if field not in QUERY_FIELDS:
            raise ValueError(f"Unknown query field: {field}")
        return [r for r in self._read_reports() if field_value(r.model_dump(mode="json"), field) == value]

    def list_all(self) -> List[StoredReport]:
        return self._read_reports()
