"""Typed records exchanged with the bookmark service."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class UserProfile:
    id: int
    username: str
    is_owner: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        # The web client stored ``owner``; accept both spellings.
        owner = data.get("is_owner", data.get("owner", False))
        return cls(id=int(data["id"]), username=str(data["username"]), is_owner=bool(owner))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "username": self.username, "owner": self.is_owner}


@dataclass(frozen=True)
class Session:
    """Authenticated identity of the current process.

    ``token`` is the empty string when nobody is logged in; it is never
    ``None``.
    """

    token: str = ""
    profile: Optional[UserProfile] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token != ""


@dataclass(frozen=True)
class ImportOptions:
    """Inputs of one bulk import.

    ``content`` holds the exported bookmarks HTML; use :meth:`from_path` to
    read it from disk.
    """

    content: bytes
    filename: str = "bookmarks.html"
    generate_tags: bool = False
    create_archive: bool = False

    @classmethod
    def from_path(
        cls, path: str | Path, *, generate_tags: bool = False, create_archive: bool = False
    ) -> "ImportOptions":
        p = Path(path)
        return cls(
            content=p.read_bytes(),
            filename=p.name,
            generate_tags=generate_tags,
            create_archive=create_archive,
        )


class EventKind(str, Enum):
    PROGRESS = "progress"
    SUCCESS = "success"
    ERROR = "error"
    COMPLETE = "complete"


@dataclass(frozen=True)
class ImportEvent:
    kind: EventKind
    message: str = ""
    current: int = 0
    total: int = 0
    url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportEvent":
        """Build an event from its wire form.

        The server names the variant ``type``; ``kind`` is accepted too.
        Raises ``ValueError`` for an unknown variant or non-integer counters.
        """
        kind = EventKind(data.get("type") or data.get("kind"))
        return cls(
            kind=kind,
            message=str(data.get("message") or ""),
            current=int(data.get("current") or 0),
            total=int(data.get("total") or 0),
            url=data.get("url") or None,
        )


@dataclass(frozen=True)
class Tag:
    id: int
    name: str
    count: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tag":
        return cls(id=int(data.get("id") or 0), name=str(data.get("name") or ""), count=data.get("count"))


@dataclass(frozen=True)
class Bookmark:
    id: int
    url: str
    title: str = ""
    excerpt: str = ""
    author: str = ""
    is_archive: bool = False
    created_at: int = 0
    updated_at: int = 0
    tags: List[Tag] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bookmark":
        return cls(
            id=int(data.get("id") or 0),
            url=str(data.get("url") or ""),
            title=str(data.get("title") or ""),
            excerpt=str(data.get("excerpt") or ""),
            author=str(data.get("author") or ""),
            is_archive=bool(data.get("is_archive")),
            created_at=int(data.get("created_at") or 0),
            updated_at=int(data.get("updated_at") or 0),
            tags=[Tag.from_dict(t) for t in data.get("tags") or []],
        )


@dataclass(frozen=True)
class BookmarkContent:
    id: int
    url: str
    title: str
    html: str
    created_at: int = 0
    updated_at: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookmarkContent":
        return cls(
            id=int(data.get("id") or 0),
            url=str(data.get("url") or ""),
            title=str(data.get("title") or ""),
            html=str(data.get("html") or ""),
            created_at=int(data.get("created_at") or 0),
            # the server spells this field ``update_at``
            updated_at=int(data.get("update_at") or data.get("updated_at") or 0),
        )


@dataclass(frozen=True)
class Page(Generic[T]):
    rows: List[T]
    total: int


@dataclass(frozen=True)
class Captcha:
    captcha_id: str
    image: str
    # Only filled by non-release servers.
    answer: Optional[str] = None


@dataclass(frozen=True)
class LoginResult:
    id: int
    username: str
    token: str
