"""In-memory session holder backed by a :class:`CredentialStore`."""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from .models import Session, UserProfile
from .storage import CredentialStore

logger = logging.getLogger(__name__)

Listener = Callable[[Session], None]


class SessionState:
    """Source of truth for "is someone logged in".

    Every mutation is written through to the store before listeners are
    told about it.  The instance is shared by the transport and the import
    client, which may run on several threads, so mutations hold a lock.
    """

    def __init__(self, store: CredentialStore):
        self._store = store
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []
        initial = store.load()
        self._token = initial.token
        self._profile = initial.profile

    def get_token(self) -> str:
        return self._token

    def set_token(self, token: str) -> None:
        with self._lock:
            self._token = token or ""
            if self._token:
                self._store.set_token(self._token)
            else:
                self._store.remove_token()
            snapshot = self.snapshot()
        self._emit(snapshot)

    def get_profile(self) -> Optional[UserProfile]:
        return self._profile

    def set_profile(self, profile: Optional[UserProfile]) -> None:
        with self._lock:
            self._profile = profile
            self._store.set_profile(profile)
            snapshot = self.snapshot()
        self._emit(snapshot)

    def is_authenticated(self) -> bool:
        return self._token != ""

    def snapshot(self) -> Session:
        return Session(token=self._token, profile=self._profile)

    def logout(self) -> bool:
        """Forget the token and profile and purge the store.

        Returns ``True`` only if a session was actually cleared, so callers
        can run one-off side effects exactly once no matter how many threads
        race here.
        """
        with self._lock:
            had_session = self._token != "" or self._profile is not None
            self._token = ""
            self._profile = None
            self._store.clear()
            snapshot = self.snapshot()
        if had_session:
            logger.info("Session cleared")
            self._emit(snapshot)
        return had_session

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every change; returns an unsubscribe function."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, snapshot: Session) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(snapshot)
