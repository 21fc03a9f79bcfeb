from __future__ import annotations
import os
from pathlib import Path
import yaml
from dotenv import find_dotenv, load_dotenv

DEFAULT_CONFIG_PATH = "config/default.yaml"


def load_config(config_path: str | None = None) -> dict:
    # .env next to where the app is launched, like config/
    load_dotenv(find_dotenv(usecwd=True))
    p = Path(config_path or os.environ.get("CHAMBER_CONFIG", DEFAULT_CONFIG_PATH))
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    return yaml.safe_load(p.read_text(encoding="utf-8")) or {}
