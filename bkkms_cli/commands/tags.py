"""Tag commands."""

from __future__ import annotations

import json
from dataclasses import asdict

from ..api import list_tags, rename_tag
from ..core import format_rows, get_context


def cmd_tags_list(args):
    ctx = get_context()
    tags = list_tags(ctx.transport, args.name)
    rows = [{"id": t.id, "name": t.name, "count": t.count if t.count is not None else ""} for t in tags]
    if args.json:
        print(json.dumps([asdict(t) for t in tags], ensure_ascii=False, indent=2))
    else:
        format_rows(rows, ["id", "name", "count"])


def cmd_tags_rename(args):
    ctx = get_context()
    rename_tag(ctx.transport, args.id, args.name)
    print(f"renamed tag {args.id} -> {args.name}")
