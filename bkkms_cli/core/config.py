"""Configuration helpers for bkkms CLI."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(os.path.expanduser("~")) / ".bkkms.json"
# Token and profile slots live in their own file so ``config show`` never
# prints credentials.
SESSION_PATH = Path(os.path.expanduser("~")) / ".bkkms-session.json"
# Default API endpoint used when no base URL is configured
DEFAULT_BASE = "http://localhost:8080"
# Seconds before a regular API call is abandoned
DEFAULT_TIMEOUT = 30.0
# Seconds a bulk import may sit idle between two chunks of the event stream
IMPORT_TIMEOUT = 300.0


def load_config() -> Dict[str, Any]:
    """Load configuration from disk and environment."""
    cfg: Dict[str, Any] = {}
    if CONFIG_PATH.exists():
        try:
            cfg = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
        except Exception:
            logger.warning("Ignoring unreadable config file %s", CONFIG_PATH)
            cfg = {}
    if not isinstance(cfg, dict):
        cfg = {}
    if os.getenv("BKKMS_BASE_URL"):
        cfg["base_url"] = os.getenv("BKKMS_BASE_URL")
    if os.getenv("BKKMS_TIMEOUT"):
        cfg["timeout"] = os.getenv("BKKMS_TIMEOUT")
    return cfg


def save_config(base_url: str | None, timeout: float | None = None) -> None:
    """Persist configuration to CONFIG_PATH."""
    cfg = load_config()
    if base_url is not None:
        cfg["base_url"] = base_url.rstrip("/")
    if timeout is not None:
        cfg["timeout"] = timeout
    CONFIG_PATH.write_text(json.dumps(cfg, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"Saved config to {CONFIG_PATH}")


def get_base_url() -> str:
    """Return the API base URL without a trailing slash.

    The service mounts its routes under ``/api/v1`` and the resource clients
    already include that prefix, so a configured base that ends with it is
    trimmed back to the server root.
    """
    base = (load_config().get("base_url") or DEFAULT_BASE).rstrip("/")
    for suffix in ("/api/v1", "/api"):
        if base.endswith(suffix):
            base = base[: -len(suffix)]
            break
    return base


def get_timeout() -> float:
    raw = load_config().get("timeout")
    if raw in (None, ""):
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid timeout %r, using %s", raw, DEFAULT_TIMEOUT)
        return DEFAULT_TIMEOUT
    return value if value > 0 else DEFAULT_TIMEOUT


def get_session_path() -> Path:
    override = os.getenv("BKKMS_SESSION_FILE")
    return Path(override) if override else SESSION_PATH
