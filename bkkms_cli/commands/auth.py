"""Authentication related commands."""

from __future__ import annotations

import base64
import binascii
import json
import sys
from pathlib import Path

from ..api import get_captcha, sign_in
from ..core import Captcha, get_context
from ..core.interactive import ask_secret, ask_text


def _captcha_bytes(captcha: Captcha) -> bytes:
    """Decode the captcha image, which may be a ``data:`` URI or bare base64."""
    image = captcha.image
    if image.startswith("data:") and "," in image:
        image = image.split(",", 1)[1]
    try:
        return base64.b64decode(image, validate=False)
    except (binascii.Error, ValueError):
        return b""


def _write_captcha(captcha: Captcha, out: str | None) -> Path:
    path = Path(out or "captcha.png").resolve()
    path.write_bytes(_captcha_bytes(captcha))
    return path


def cmd_auth_captcha(args):
    ctx = get_context()
    captcha = get_captcha(ctx.transport)
    path = _write_captcha(captcha, args.out)
    print(json.dumps({"captcha_id": captcha.captcha_id, "image": str(path)}, ensure_ascii=False, indent=2))


def cmd_auth_login(args):
    ctx = get_context()
    username = args.username or ask_text("Username:")
    password = args.password or ask_secret("Password:")

    captcha = get_captcha(ctx.transport)
    path = _write_captcha(captcha, args.captcha_out)
    print(f"Captcha image saved to {path}")
    answer = args.captcha or ask_text("Captcha:", default=captcha.answer)

    profile = sign_in(ctx.transport, ctx.session, username, password, answer, captcha.captcha_id)
    print(f"Logged in as {profile.username}")


def cmd_auth_logout(_args):
    ctx = get_context()
    if ctx.session.logout():
        print("Logged out")
    else:
        print("Not logged in.")


def cmd_auth_whoami(_args):
    ctx = get_context()
    if not ctx.session.is_authenticated():
        print("Not logged in. Run: bkkms auth login", file=sys.stderr)
        return 1
    profile = ctx.session.get_profile()
    data = profile.to_dict() if profile else {}
    data["base_url"] = ctx.transport.base_url
    print(json.dumps(data, ensure_ascii=False, indent=2))
