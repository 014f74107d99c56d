"""Wiring of the credential store, session and transport for one process."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Optional

from .config import get_base_url, get_session_path, get_timeout
from .http import Transport
from .session import SessionState
from .storage import CredentialStore

LOGIN_HINT = "Session expired. Run: bkkms auth login"


@dataclass
class AppContext:
    store: CredentialStore
    session: SessionState
    transport: Transport


def _redirect_to_login() -> None:
    print(LOGIN_HINT, file=sys.stderr)


def build_context(
    base_url: Optional[str] = None,
    *,
    store: Optional[CredentialStore] = None,
    timeout: Optional[float] = None,
) -> AppContext:
    store = store or CredentialStore(get_session_path())
    session = SessionState(store)
    transport = Transport(
        base_url or get_base_url(),
        session,
        timeout=timeout or get_timeout(),
        on_unauthorized=_redirect_to_login,
    )
    return AppContext(store=store, session=session, transport=transport)


_context: Optional[AppContext] = None


def get_context() -> AppContext:
    """Return the process-wide context, building it on first use."""
    global _context
    if _context is None:
        _context = build_context()
    return _context


def reset_context() -> None:
    global _context
    _context = None
