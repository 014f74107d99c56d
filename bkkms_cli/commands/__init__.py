"""Command handlers for bkkms CLI."""

from .auth import cmd_auth_captcha, cmd_auth_login, cmd_auth_logout, cmd_auth_whoami
from .bookmarks import (
    cmd_bookmarks_add,
    cmd_bookmarks_content,
    cmd_bookmarks_delete,
    cmd_bookmarks_list,
    cmd_bookmarks_update,
)
from .config import cmd_config_set, cmd_config_show
from .import_cmd import cmd_import
from .tags import cmd_tags_list, cmd_tags_rename

__all__ = [
    "cmd_auth_captcha",
    "cmd_auth_login",
    "cmd_auth_logout",
    "cmd_auth_whoami",
    "cmd_bookmarks_add",
    "cmd_bookmarks_content",
    "cmd_bookmarks_delete",
    "cmd_bookmarks_list",
    "cmd_bookmarks_update",
    "cmd_config_set",
    "cmd_config_show",
    "cmd_import",
    "cmd_tags_list",
    "cmd_tags_rename",
]
