"""Failure classification for API calls.

Every failed call is normalised into a :class:`ClassifiedError`.  The
functions here are pure so they can be exercised without a network.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    NETWORK = "network"
    BUSINESS = "business"
    UNKNOWN = "unknown"


DEFAULT_MESSAGES = {
    ErrorKind.UNAUTHORIZED: "Unauthorized, please log in again",
    ErrorKind.FORBIDDEN: "Access denied",
    ErrorKind.NOT_FOUND: "The requested resource does not exist",
    ErrorKind.SERVER_ERROR: "Server error",
    ErrorKind.NETWORK: "Network error, please check your connection",
    ErrorKind.BUSINESS: "Request failed",
    ErrorKind.UNKNOWN: "Request failed",
}

_STATUS_KINDS = {
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    500: ErrorKind.SERVER_ERROR,
}


class ClassifiedError(Exception):
    """A failed call, tagged with what went wrong."""

    def __init__(self, kind: ErrorKind, message: str = "", http_status: Optional[int] = None):
        self.kind = kind
        self.message = message or DEFAULT_MESSAGES[kind]
        self.http_status = http_status
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"ClassifiedError({self.kind.name}, {self.message!r}, http_status={self.http_status})"


class BusinessError(ClassifiedError):
    """The server answered, but its envelope carries a non-zero ``code``."""

    def __init__(self, message: str = "", http_status: Optional[int] = None, code: Optional[int] = None):
        super().__init__(ErrorKind.BUSINESS, message, http_status)
        self.code = code


def server_message(body: Any) -> str:
    """Extract the ``msg`` field from an envelope given as dict, bytes or text."""
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="ignore")
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError:
            return ""
    if isinstance(body, dict):
        msg = body.get("msg")
        if isinstance(msg, str):
            return msg.strip()
    return ""


def classify_status(status: Optional[int], body: Any = None) -> ClassifiedError:
    """Map an HTTP failure to a classified error.

    ``status`` is ``None`` when no response was received at all, which is a
    network failure.  Statuses without a dedicated kind become ``UNKNOWN``.
    """
    if status is None:
        return ClassifiedError(ErrorKind.NETWORK, server_message(body))
    kind = _STATUS_KINDS.get(status, ErrorKind.UNKNOWN)
    return ClassifiedError(kind, server_message(body), status)


def classify_envelope(body: Any, http_status: Optional[int] = None) -> Optional[ClassifiedError]:
    """Return a business error for an envelope with a non-zero ``code``.

    Payloads that are not envelopes, or carry no ``code`` at all, are not
    errors.
    """
    if not isinstance(body, dict):
        return None
    code = body.get("code")
    if code is None or code == 0:
        return None
    return BusinessError(server_message(body), http_status, code)
