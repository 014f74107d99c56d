"""Bookmark CRUD endpoints."""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..core.http import Transport
from ..core.models import Bookmark, BookmarkContent, Page


def _tag_items(tags: Iterable[str] | None) -> List[dict]:
    return [{"name": name} for name in (tags or []) if name]


def list_bookmarks(
    transport: Transport,
    *,
    keyword: Optional[str] = None,
    tags: Optional[str] = None,
    page: int = 1,
    page_size: Optional[int] = None,
) -> Page[Bookmark]:
    """Return one page of bookmarks.

    ``tags`` is a comma separated list of tag names, each matched exactly.
    """
    data = transport.get(
        "/api/v1/bookmarks",
        {"keyword": keyword, "tags": tags, "page": page, "page_size": page_size},
    ) or {}
    rows = [Bookmark.from_dict(r) for r in data.get("rows") or []]
    return Page(rows=rows, total=int(data.get("total") or 0))


def create_bookmark(
    transport: Transport,
    url: str,
    *,
    title: str = "",
    excerpt: str = "",
    tags: Iterable[str] | None = None,
    create_archive: bool = False,
):
    return transport.post(
        "/api/v1/bookmark",
        {
            "url": url,
            "title": title,
            "excerpt": excerpt,
            "tags": _tag_items(tags),
            "create_archive": create_archive,
        },
    )


def update_bookmark(
    transport: Transport,
    bookmark_id: int,
    url: str,
    *,
    title: str = "",
    excerpt: str = "",
    author: str = "",
    tags: Iterable[str] | None = None,
    create_archive: bool = False,
):
    return transport.put(
        "/api/v1/bookmarks",
        {
            "id": bookmark_id,
            "url": url,
            "title": title,
            "excerpt": excerpt,
            "author": author,
            "tags": _tag_items(tags),
            "create_archive": create_archive,
        },
    )


def delete_bookmarks(transport: Transport, ids: Iterable[int]):
    return transport.delete("/api/v1/bookmark", [int(i) for i in ids])


def get_bookmark_content(transport: Transport, bookmark_id: int) -> BookmarkContent:
    data = transport.get(f"/api/v1/bookmark/{int(bookmark_id)}/content") or {}
    return BookmarkContent.from_dict(data)
