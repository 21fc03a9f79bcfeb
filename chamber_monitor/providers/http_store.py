from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from .base import JobStore, QUERY_FIELDS, StoreError
from ..models import JobReport, StoredReport

log = logging.getLogger(__name__)

COLLECTION = "/api/v1/completed_jobs"


def _resolve_store_url(config: dict) -> str:
    store_cfg = (config.get("store", {}) or {}).get("http", {}) or {}
    return store_cfg.get("url") or os.environ.get("STORE_URL", "http://127.0.0.1:8009")


class HttpJobStore(JobStore):
    """Report store behind the REST service in store_api/mock_api.py."""

    def __init__(self, base_url: str, timeout: float = 8.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: dict) -> "HttpJobStore":
        store_cfg = (config.get("store", {}) or {}).get("http", {}) or {}
        return cls(_resolve_store_url(config), timeout=float(store_cfg.get("timeout_s", 8)))

    def create(self, report: JobReport) -> str:
        try:
            r = requests.post(
                f"{self.base_url}{COLLECTION}",
                json=report.model_dump(mode="json"),
                timeout=self.timeout,
            )
            r.raise_for_status()
            resp = r.json()
        except requests.RequestException as e:
            raise StoreError(f"Could not save report: {e}") from e

        doc_id = resp.get("id")
        log.info("report saved: id=%s machine=%s", doc_id, report.machine_name)
        return doc_id

    def _fetch(self, params: Optional[Dict[str, str]]) -> List[StoredReport]:
        try:
            r = requests.get(f"{self.base_url}{COLLECTION}", params=params, timeout=self.timeout)
            r.raise_for_status()
            body: Dict[str, Any] = r.json()
        except requests.RequestException as e:
            raise StoreError(f"Search failed: {e}") from e

        try:
            return [StoredReport.model_validate(item) for item in body.get("items", [])]
        except (AttributeError, ValidationError) as e:
            raise StoreError(f"Search failed: malformed store response: {e}") from e

    def query_by(self, field: str, value: str) -> List[StoredReport]:
        if field not in QUERY_FIELDS:
            raise ValueError(f"Unknown query field: {field}")
        return self._fetch({"field": field, "value": value})

    def list_all(self) -> List[StoredReport]:
        return self._fetch(None)
