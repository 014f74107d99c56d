"""Command line entry point for bkkms CLI."""

from __future__ import annotations

import argparse
import logging
import sys

from bkkms_cli.core import DEFAULT_BASE, ClassifiedError
from bkkms_cli.commands import (
    cmd_auth_captcha,
    cmd_auth_login,
    cmd_auth_logout,
    cmd_auth_whoami,
    cmd_bookmarks_add,
    cmd_bookmarks_content,
    cmd_bookmarks_delete,
    cmd_bookmarks_list,
    cmd_bookmarks_update,
    cmd_config_set,
    cmd_config_show,
    cmd_import,
    cmd_tags_list,
    cmd_tags_rename,
)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _add_bookmark_fields(p: argparse.ArgumentParser) -> None:
    p.add_argument("--title", help="Bookmark title")
    p.add_argument("--excerpt", help="Short description")
    p.add_argument("--tag", action="append", default=[], help="Tag name (repeatable)")
    p.add_argument("--archive", action="store_true", help="Ask the server to create an archive copy")


def build_parser():
    parser = argparse.ArgumentParser(prog="bkkms", description="Bookmark KMS CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    sub = parser.add_subparsers(dest="cmd")

    # config
    p_cfg = sub.add_parser("config", help="Client configuration")
    sub_cfg = p_cfg.add_subparsers(dest="config_cmd")
    p_cfg_set = sub_cfg.add_parser("set", help="Save base URL and timeout to ~/.bkkms.json")
    p_cfg_set.add_argument("--base-url", help=f"Server URL (default: {DEFAULT_BASE})")
    p_cfg_set.add_argument("--timeout", type=float, help="Request timeout in seconds")
    p_cfg_set.set_defaults(func=cmd_config_set)
    p_cfg_show = sub_cfg.add_parser("show", help="Show effective configuration")
    p_cfg_show.set_defaults(func=cmd_config_show)

    # auth
    p_auth = sub.add_parser("auth", help="Authentication")
    sub_auth = p_auth.add_subparsers(dest="auth_cmd")

    p_auth_captcha = sub_auth.add_parser("captcha", help="Fetch a captcha challenge")
    p_auth_captcha.add_argument("--out", help="Where to write the captcha image (default: captcha.png)")
    p_auth_captcha.set_defaults(func=cmd_auth_captcha)

    p_auth_login = sub_auth.add_parser("login", help="Log in and store the session token")
    p_auth_login.add_argument("--username")
    p_auth_login.add_argument("--password")
    p_auth_login.add_argument("--captcha", help="Captcha answer (prompted if omitted)")
    p_auth_login.add_argument("--captcha-out", help="Where to write the captcha image (default: captcha.png)")
    p_auth_login.set_defaults(func=cmd_auth_login)

    p_auth_logout = sub_auth.add_parser("logout", help="Forget the stored session")
    p_auth_logout.set_defaults(func=cmd_auth_logout)

    p_auth_whoami = sub_auth.add_parser("whoami", help="Show the logged in user")
    p_auth_whoami.set_defaults(func=cmd_auth_whoami)

    # bookmarks
    p_bm = sub.add_parser("bookmarks", help="Manage bookmarks")
    sub_bm = p_bm.add_subparsers(dest="bookmarks_cmd")

    p_bm_list = sub_bm.add_parser("list", help="List bookmarks")
    p_bm_list.add_argument("--keyword", help="Search url, title, excerpt and content")
    p_bm_list.add_argument("--tags", help="Comma separated tag names")
    p_bm_list.add_argument("--page", type=int, default=1)
    p_bm_list.add_argument("--page-size", type=int)
    p_bm_list.add_argument("--json", action="store_true", help="Print raw JSON")
    p_bm_list.set_defaults(func=cmd_bookmarks_list)

    p_bm_add = sub_bm.add_parser("add", help="Create a bookmark")
    p_bm_add.add_argument("url")
    _add_bookmark_fields(p_bm_add)
    p_bm_add.set_defaults(func=cmd_bookmarks_add)

    p_bm_update = sub_bm.add_parser("update", help="Edit a bookmark")
    p_bm_update.add_argument("id", type=int)
    p_bm_update.add_argument("--url", required=True)
    p_bm_update.add_argument("--author")
    _add_bookmark_fields(p_bm_update)
    p_bm_update.set_defaults(func=cmd_bookmarks_update)

    p_bm_delete = sub_bm.add_parser("delete", help="Delete bookmarks")
    p_bm_delete.add_argument("ids", nargs="+", type=int, help="Bookmark ids")
    p_bm_delete.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    p_bm_delete.set_defaults(func=cmd_bookmarks_delete)

    p_bm_content = sub_bm.add_parser("content", help="Download the archived content of a bookmark")
    p_bm_content.add_argument("id", type=int)
    p_bm_content.add_argument("--out", help="Output file, '-' for stdout (default: <title>.html)")
    p_bm_content.set_defaults(func=cmd_bookmarks_content)

    p_bm_import = sub_bm.add_parser("import", help="Import an exported bookmarks HTML file")
    p_bm_import.add_argument("file", help="Bookmarks HTML export")
    p_bm_import.add_argument("--generate-tags", action="store_true", help="Let the server generate tags")
    p_bm_import.add_argument("--archive", action="store_true", help="Create archive copies")
    p_bm_import.set_defaults(func=cmd_import)

    # tags
    p_tags = sub.add_parser("tags", help="Manage tags")
    sub_tags = p_tags.add_subparsers(dest="tags_cmd")

    p_tags_list = sub_tags.add_parser("list", help="List tags")
    p_tags_list.add_argument("--name", help="Filter by name")
    p_tags_list.add_argument("--json", action="store_true", help="Print raw JSON")
    p_tags_list.set_defaults(func=cmd_tags_list)

    p_tags_rename = sub_tags.add_parser("rename", help="Rename a tag")
    p_tags_rename.add_argument("id", type=int)
    p_tags_rename.add_argument("name")
    p_tags_rename.set_defaults(func=cmd_tags_rename)

    groups = {
        "config": (p_cfg, "config_cmd"),
        "auth": (p_auth, "auth_cmd"),
        "bookmarks": (p_bm, "bookmarks_cmd"),
        "tags": (p_tags, "tags_cmd"),
    }
    return parser, groups


def main(argv=None):
    parser, groups = build_parser()
    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 0
    group_parser, dest = groups[args.cmd]
    if not getattr(args, dest, None):
        group_parser.print_help()
        return 0

    _setup_logging(args.verbose)
    try:
        return args.func(args) or 0
    except ClassifiedError:
        # Already reported to the user by the transport.
        return 2


if __name__ == "__main__":
    sys.exit(main())
