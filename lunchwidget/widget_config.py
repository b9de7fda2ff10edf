# lunchwidget/widget_config.py
# Central knobs for the Lunch Money widget: palette, fonts, storage names
# and the per-run WidgetConfig record.
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# --------------------------
# Palette (two-stop gradients + text colors)
# --------------------------
COLORS = {
    "bg1": "#1D1F21",
    "bg2": "#282A2E",
    "error1": "#800000",
    "error2": "#080000",
    "text": "#FFFFFF",
    "green": "#34C759",
    "red": "#FF3B30",
}

FONT_NAME = "Menlo"
REGULAR_FONT = (FONT_NAME, 11)
SMALL_FONT = (FONT_NAME, 9)

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# --------------------------
# Storage names (folder under each documents root)
# --------------------------
BASE_FILE = "LunchMoneyWidget"
API_FILE = "apiKey"
CACHE_KEY = "lunchMoneyCache"

ICLOUD = "iCloud"
LOCAL = "local"

DEFAULT_BASE_URL = "https://dev.lunchmoney.app"
DEFAULT_CACHE_MS = 7200000  # 2 hours
DEFAULT_HTTP_TIMEOUT = 30.0

# Plaid statuses that are NOT sync errors
SYNC_OK_STATUSES = ("active", "inactive", "syncing")

MAX_LAST_TRANSACTIONS = 8
PENDING_LIMIT = 50

WIDGET_SIZES = ("small", "medium", "large", "extraLarge")


@dataclass(frozen=True)
class WidgetConfig:
    base_url: str = DEFAULT_BASE_URL
    cache_ttl_ms: int = DEFAULT_CACHE_MS
    pay_cycle_mode: bool = False
    pay_cycle_marker: Optional[str] = None
    cloud_dir: Path = Path("data/icloud")
    local_dir: Path = Path("data/local")
    http_timeout: float = DEFAULT_HTTP_TIMEOUT


def _env_int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = (os.environ.get(name) or "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def load_config(widget_parameter: Optional[str] = None) -> WidgetConfig:
    """
    Build the run configuration from the environment.
    `widget_parameter` wins over LM_PAY_CYCLE_ID; any non-empty value turns
    pay-cycle mode on and doubles as the paycheck marker note.
    """
    marker = widget_parameter if widget_parameter is not None else os.environ.get("LM_PAY_CYCLE_ID")
    marker = (marker or "").strip() or None

    return WidgetConfig(
        base_url=(os.environ.get("LM_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
        cache_ttl_ms=_env_int("LM_CACHE_TTL_MS", DEFAULT_CACHE_MS),
        pay_cycle_mode=marker is not None,
        pay_cycle_marker=marker,
        cloud_dir=Path(os.environ.get("WIDGET_CLOUD_DIR") or "data/icloud"),
        local_dir=Path(os.environ.get("WIDGET_LOCAL_DIR") or "data/local"),
        http_timeout=_env_float("LM_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
    )
