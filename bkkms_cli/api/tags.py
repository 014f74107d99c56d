"""Tag endpoints."""

from __future__ import annotations

from typing import List, Optional

from ..core.http import Transport
from ..core.models import Tag


def list_tags(transport: Transport, name: Optional[str] = None) -> List[Tag]:
    data = transport.get("/api/v1/tags", {"name": name} if name else None) or []
    return [Tag.from_dict(t) for t in data]


def rename_tag(transport: Transport, tag_id: int, name: str):
    return transport.put(f"/api/v1/tag/{int(tag_id)}", {"name": name})
