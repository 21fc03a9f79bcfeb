from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from ..models import JobReport
from ..reports import render_report_text

log = logging.getLogger(__name__)


def _project_root() -> Path:
    # .../chamber_monitor/integrations/report_export.py -> project root = parents[2]
    return Path(__file__).resolve().parents[2]


def _resolve_outbox_dir(config: dict) -> Path:
    export_cfg = (config.get("export", {}) or {})
    outbox = Path(export_cfg.get("outbox_dir", "exchange/outbox"))
    if not outbox.is_absolute():
        outbox = (_project_root() / outbox).resolve()
    outbox.mkdir(parents=True, exist_ok=True)
    return outbox


def report_basename(report: JobReport) -> str:
    return f"{report.finish_time:%Y%m%dT%H%M%S}_{report.job.job_id}"


def write_report_files(report: JobReport, config: dict) -> Dict[str, Any]:
    """Plain-text report (as emailed) plus the JSON document next to it."""
    outbox = _resolve_outbox_dir(config)
    base = report_basename(report)

    txt_path = outbox / f"{base}.txt"
    json_path = outbox / f"{base}.json"
    txt_path.write_text(render_report_text(report), encoding="utf-8")
    json_path.write_text(
        json.dumps(report.model_dump(mode="json"), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )

    log.info("report exported: %s", txt_path)
    return {
        "ok": True,
        "target": "exchange_outbox",
        "path": str(txt_path),
        "json_path": str(json_path),
    }
