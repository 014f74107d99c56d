"""Bookmark related commands."""

from __future__ import annotations

import json
import sys
from dataclasses import asdict
from pathlib import Path

from ..api import (
    create_bookmark,
    delete_bookmarks,
    get_bookmark_content,
    list_bookmarks,
    update_bookmark,
)
from ..core import format_rows, format_ts, get_context, safe_name
from ..core.interactive import confirm


def cmd_bookmarks_list(args):
    ctx = get_context()
    page = list_bookmarks(
        ctx.transport,
        keyword=args.keyword,
        tags=args.tags,
        page=args.page,
        page_size=args.page_size,
    )
    if args.json:
        print(json.dumps({"total": page.total, "rows": [asdict(b) for b in page.rows]}, ensure_ascii=False, indent=2))
        return
    rows = [
        {
            "id": b.id,
            "title": b.title,
            "url": b.url,
            "tags": ",".join(t.name for t in b.tags),
            "archived": "yes" if b.is_archive else "",
            "updated": format_ts(b.updated_at),
        }
        for b in page.rows
    ]
    format_rows(rows, ["id", "title", "url", "tags", "archived", "updated"])
    print(f"Page {args.page}: {len(rows)} of {page.total} bookmarks")


def cmd_bookmarks_add(args):
    ctx = get_context()
    create_bookmark(
        ctx.transport,
        args.url,
        title=args.title or "",
        excerpt=args.excerpt or "",
        tags=args.tag,
        create_archive=args.archive,
    )
    print(f"added {args.url}")


def cmd_bookmarks_update(args):
    ctx = get_context()
    update_bookmark(
        ctx.transport,
        args.id,
        args.url,
        title=args.title or "",
        excerpt=args.excerpt or "",
        author=args.author or "",
        tags=args.tag,
        create_archive=args.archive,
    )
    print(f"updated {args.id}")


def cmd_bookmarks_delete(args):
    ctx = get_context()
    ids = sorted(set(args.ids))
    if not args.yes and not confirm(f"Delete {len(ids)} bookmark(s)?", default=False):
        print("Nothing deleted.")
        return 0
    delete_bookmarks(ctx.transport, ids)
    print(f"deleted {', '.join(str(i) for i in ids)}")


def cmd_bookmarks_content(args):
    ctx = get_context()
    content = get_bookmark_content(ctx.transport, args.id)
    if args.out == "-":
        sys.stdout.write(content.html)
        return
    out = Path(args.out) if args.out else Path(f"{safe_name(content.title or str(content.id))}.html")
    out.write_text(content.html, encoding="utf-8")
    print(f"Wrote {out}")
