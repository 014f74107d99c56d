"""Core utilities for bkkms CLI."""

from .config import (
    CONFIG_PATH,
    SESSION_PATH,
    DEFAULT_BASE,
    DEFAULT_TIMEOUT,
    load_config,
    save_config,
    get_base_url,
    get_timeout,
)
from .errors import BusinessError, ClassifiedError, ErrorKind, classify_envelope, classify_status
from .models import (
    Bookmark,
    BookmarkContent,
    Captcha,
    EventKind,
    ImportEvent,
    ImportOptions,
    LoginResult,
    Page,
    Session,
    Tag,
    UserProfile,
)
from .storage import CredentialStore
from .session import SessionState
from .http import Transport, encode_multipart
from .framing import LineFramer, parse_event_line
from .importer import ImportJob, ImportStream, import_bookmarks, start_import
from .context import AppContext, build_context, get_context
from .utils import format_rows, format_ts, safe_name, split_csv

__all__ = [
    "CONFIG_PATH", "SESSION_PATH", "DEFAULT_BASE", "DEFAULT_TIMEOUT",
    "load_config", "save_config", "get_base_url", "get_timeout",
    "BusinessError", "ClassifiedError", "ErrorKind", "classify_envelope", "classify_status",
    "Bookmark", "BookmarkContent", "Captcha", "EventKind", "ImportEvent", "ImportOptions",
    "LoginResult", "Page", "Session", "Tag", "UserProfile",
    "CredentialStore", "SessionState",
    "Transport", "encode_multipart",
    "LineFramer", "parse_event_line",
    "ImportJob", "ImportStream", "import_bookmarks", "start_import",
    "AppContext", "build_context", "get_context",
    "format_rows", "format_ts", "safe_name", "split_csv",
]
