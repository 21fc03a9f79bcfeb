from __future__ import annotations
from .base import JobStore, StoreError
from .memory import MemoryJobStore


def get_store(cfg: dict) -> JobStore:
    backend = (cfg.get("store", {}) or {}).get("backend", "memory")

    if backend == "memory":
        return MemoryJobStore()
    if backend == "http":
        from .http_store import HttpJobStore
        return HttpJobStore.from_config(cfg)
    if backend == "google_sheets":
        # Lazy import (so memory/http work without google libs)
        from .sheets_store import SheetsJobStore
        return SheetsJobStore.from_config(cfg)
    raise ValueError(f"Unknown store backend: {backend}")


__all__ = ["JobStore", "StoreError", "MemoryJobStore", "get_store"]
