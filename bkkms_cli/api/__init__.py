"""Typed calls for each REST resource of the bookmark service."""

from .auth import get_captcha, login, sign_in
from .bookmarks import (
    create_bookmark,
    delete_bookmarks,
    get_bookmark_content,
    list_bookmarks,
    update_bookmark,
)
from .tags import list_tags, rename_tag

__all__ = [
    "get_captcha",
    "login",
    "sign_in",
    "create_bookmark",
    "delete_bookmarks",
    "get_bookmark_content",
    "list_bookmarks",
    "update_bookmark",
    "list_tags",
    "rename_tag",
]
