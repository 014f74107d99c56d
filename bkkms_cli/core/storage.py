"""Persistent credential slots.

Two named slots are kept in a small JSON file: the bearer token and the
user profile (itself a JSON-encoded string).  The literal strings
``"undefined"`` and ``"null"`` are what a careless writer leaves behind when
it stores a missing value, so they read back as absent.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from .config import get_session_path
from .models import Session, UserProfile

logger = logging.getLogger(__name__)

TOKEN_KEY = "bk_kms_token"
USER_INFO_KEY = "bk_kms_user_info"

_ABSENT = ("", "undefined", "null")


class CredentialStore:
    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path is not None else get_session_path()

    # --- raw slots ---

    def _read_slots(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except Exception as e:
            logger.warning("Cannot read credential file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_slots(self, slots: Dict[str, str]) -> None:
        if not slots:
            if self.path.exists():
                self.path.unlink()
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(slots, ensure_ascii=False, indent=2), encoding="utf-8")

    def _get(self, key: str) -> Optional[str]:
        value = self._read_slots().get(key)
        if value is None or value in _ABSENT:
            return None
        return value

    def _set(self, key: str, value: str) -> None:
        slots = self._read_slots()
        slots[key] = value
        self._write_slots(slots)

    def _remove(self, key: str) -> None:
        slots = self._read_slots()
        if slots.pop(key, None) is not None:
            self._write_slots(slots)

    # --- token ---

    def get_token(self) -> str:
        return self._get(TOKEN_KEY) or ""

    def set_token(self, token: str) -> None:
        self._set(TOKEN_KEY, token)

    def remove_token(self) -> None:
        self._remove(TOKEN_KEY)

    # --- profile ---

    def get_profile(self) -> Optional[UserProfile]:
        raw = self._get(USER_INFO_KEY)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            if data is None:
                return None
            return UserProfile.from_dict(data)
        except Exception as e:
            logger.warning("Failed to parse stored user profile: %s", e)
            return None

    def set_profile(self, profile: Optional[UserProfile]) -> None:
        if profile is None:
            self.remove_profile()
            return
        self._set(USER_INFO_KEY, json.dumps(profile.to_dict(), ensure_ascii=False))

    def remove_profile(self) -> None:
        self._remove(USER_INFO_KEY)

    # --- whole session ---

    def load(self) -> Session:
        return Session(token=self.get_token(), profile=self.get_profile())

    def save(self, session: Session) -> None:
        slots = self._read_slots()
        slots.pop(TOKEN_KEY, None)
        slots.pop(USER_INFO_KEY, None)
        if session.token:
            slots[TOKEN_KEY] = session.token
        if session.profile is not None:
            slots[USER_INFO_KEY] = json.dumps(session.profile.to_dict(), ensure_ascii=False)
        self._write_slots(slots)

    def clear(self) -> None:
        slots = self._read_slots()
        slots.pop(TOKEN_KEY, None)
        slots.pop(USER_INFO_KEY, None)
        self._write_slots(slots)
