"""Configuration commands."""

from __future__ import annotations

import json

from ..core import CONFIG_PATH, get_base_url, get_timeout, save_config
from ..core.config import get_session_path


def cmd_config_set(args):
    save_config(args.base_url, args.timeout)


def cmd_config_show(_args):
    data = {
        "config_file": str(CONFIG_PATH),
        "session_file": str(get_session_path()),
        "base_url": get_base_url(),
        "timeout": get_timeout(),
    }
    print(json.dumps(data, ensure_ascii=False, indent=2))
