"""Output helpers for bkkms CLI."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List

__all__ = [
    "format_rows",
    "format_ts",
    "safe_name",
    "split_csv",
]


def format_rows(rows: List[Dict[str, Any]], fields: List[str]) -> None:
    if not rows:
        print("(no data)")
        return
    widths = [max(len(str(r.get(f, ""))) for r in rows + [dict(zip(fields, fields))]) for f in fields]
    header = " | ".join(f.ljust(w) for f, w in zip(fields, widths))
    sep = "-+-".join("-" * w for w in widths)
    print(header)
    print(sep)
    for r in rows:
        print(" | ".join(str(r.get(f, "")).ljust(w) for f, w in zip(fields, widths)))


def format_ts(ts: int) -> str:
    """Render a unix timestamp as local ``YYYY-MM-DD HH:MM``; 0 renders empty."""
    if not ts:
        return ""
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M")


def safe_name(name: str, maxlen: int = 120) -> str:
    """Return a filesystem-safe representation of *name*."""
    name = (name or "").strip()
    name = re.sub(r"[\\/:*?\"<>|]", "_", name)
    name = re.sub(r"\s+", " ", name)
    if len(name) > maxlen:
        name = name[:maxlen].rstrip()
    return name or "untitled"


def split_csv(value: str | None) -> List[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]
