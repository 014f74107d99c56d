"""HTTP transport shared by every API call.

The implementation uses :mod:`urllib` from the Python standard library.
One :class:`Transport` is configured per process with the server base URL,
a timeout and the :class:`~bkkms_cli.core.session.SessionState` it reads the
bearer token from.  Failures are turned into
:class:`~bkkms_cli.core.errors.ClassifiedError` and raised; nothing is
cached or retried.
"""

from __future__ import annotations

import json
import logging
import mimetypes
import sys
import uuid
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from .config import DEFAULT_TIMEOUT, IMPORT_TIMEOUT
from .errors import ClassifiedError, ErrorKind, classify_envelope, classify_status
from .session import SessionState

logger = logging.getLogger(__name__)

Notifier = Callable[[ClassifiedError], None]


def print_error(err: ClassifiedError) -> None:
    """Default notifier: one line on stderr per failed call."""
    if err.kind is ErrorKind.FORBIDDEN:
        print(f"Forbidden: {err.message}", file=sys.stderr)
    elif err.http_status is not None and err.kind is not ErrorKind.BUSINESS:
        print(f"[HTTP {err.http_status}] {err.message}", file=sys.stderr)
    else:
        print(err.message, file=sys.stderr)


def encode_multipart(fields: Dict[str, object]) -> Tuple[bytes, str]:
    """Encode ``fields`` as ``multipart/form-data``.

    Each value is either a simple string/bytes or a tuple
    ``(filename, content, ctype)`` for file uploads.  Returns the body and
    the matching ``Content-Type`` header value.
    """

    boundary = f"----bkkmscli{uuid.uuid4().hex}"

    def to_b(x):
        return x if isinstance(x, (bytes, bytearray)) else str(x).encode("utf-8")

    parts: list[bytes] = []
    for name, value in (fields or {}).items():
        parts.append(f"--{boundary}\r\n".encode())
        if isinstance(value, tuple):
            filename, content, ctype = value
            if ctype is None:
                ctype = mimetypes.guess_type(filename)[0] or "application/octet-stream"
            parts.append(
                f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'.encode()
            )
            parts.append(f"Content-Type: {ctype}\r\n\r\n".encode())
            parts.append(to_b(content))
            parts.append(b"\r\n")
        else:
            parts.append(f'Content-Disposition: form-data; name="{name}"\r\n\r\n'.encode())
            parts.append(to_b(value))
            parts.append(b"\r\n")
    parts.append(f"--{boundary}--\r\n".encode())
    return b"".join(parts), f"multipart/form-data; boundary={boundary}"


def _read_error_body(e: HTTPError) -> bytes:
    try:
        return e.read() or b""
    except Exception:
        return b""


class Transport:
    """Single configured HTTP client.

    ``notify`` is called once for every failed call with the classified
    error.  ``on_unauthorized`` runs when a 401 actually ends the current
    session; concurrent 401s only trigger it once because
    :meth:`SessionState.logout` reports whether it cleared anything.
    """

    def __init__(
        self,
        base_url: str,
        session: SessionState,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        stream_timeout: float = IMPORT_TIMEOUT,
        notify: Optional[Notifier] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout
        self.stream_timeout = stream_timeout
        self.notify = notify or print_error
        self.on_unauthorized = on_unauthorized

    # --- outbound ---

    def url_for(self, path: str, params: Optional[Dict[str, Any]] = None) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            url = path
        elif path.startswith("/"):
            url = f"{self.base_url}{path}"
        else:
            url = f"{self.base_url}/{path}"
        query = {k: v for k, v in (params or {}).items() if v is not None and v != ""}
        if query:
            url = f"{url}?{urlencode(query)}"
        return url

    def _headers(self, accept: str = "application/json") -> Dict[str, str]:
        headers = {"Accept": accept, "Content-Type": "application/json"}
        token = self.session.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    # --- inbound ---

    def fail(self, err: ClassifiedError) -> ClassifiedError:
        """Run the side effects of a failed call and return ``err`` for raising."""
        logger.info("Request failed: kind=%s status=%s message=%s", err.kind.name, err.http_status, err.message)
        if err.kind is ErrorKind.UNAUTHORIZED and self.session.logout():
            if self.on_unauthorized is not None:
                self.on_unauthorized()
        self.notify(err)
        return err

    def _open(self, req: Request, timeout: float):
        try:
            return urlopen(req, timeout=timeout)
        except HTTPError as e:
            raise self.fail(classify_status(e.code, _read_error_body(e))) from e
        except (URLError, OSError) as e:
            logger.debug("Network failure for %s: %s", req.full_url, e)
            raise self.fail(classify_status(None)) from e
        except ValueError as e:
            raise self.fail(ClassifiedError(ErrorKind.UNKNOWN, str(e))) from e

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        payload: Any = None,
        raw: bool = False,
    ) -> Any:
        """Perform one call and return the envelope's ``data``.

        Binary bodies, event streams and ``raw=True`` calls return the body
        bytes untouched.  A JSON envelope with a non-zero ``code`` raises a
        :class:`~bkkms_cli.core.errors.BusinessError`.
        """

        data = None
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
        req = Request(
            url=self.url_for(path, params),
            method=method.upper(),
            headers=self._headers(),
            data=data,
        )
        logger.debug("%s %s", req.get_method(), req.full_url)
        resp = self._open(req, self.timeout)
        try:
            with resp:
                ctype = (resp.headers.get("Content-Type") or "").lower()
                status = getattr(resp, "status", None)
                body = resp.read()
        except OSError as e:
            raise self.fail(classify_status(None)) from e

        if raw or "text/event-stream" in ctype or "application/json" not in ctype:
            return body
        try:
            decoded = json.loads(body.decode("utf-8"))
        except ValueError as e:
            logger.debug("Undecodable JSON body from %s: %s", req.full_url, e)
            raise self.fail(ClassifiedError(ErrorKind.UNKNOWN, http_status=status)) from e

        err = classify_envelope(decoded, status)
        if err is not None:
            raise self.fail(err)
        if isinstance(decoded, dict) and "code" in decoded:
            return decoded.get("data")
        return decoded

    def get(self, path: str, params: Optional[Dict[str, Any]] = None, **kw) -> Any:
        return self.request("GET", path, params=params, **kw)

    def post(self, path: str, payload: Any = None, **kw) -> Any:
        return self.request("POST", path, payload=payload, **kw)

    def put(self, path: str, payload: Any = None, **kw) -> Any:
        return self.request("PUT", path, payload=payload, **kw)

    def delete(self, path: str, payload: Any = None, **kw) -> Any:
        return self.request("DELETE", path, payload=payload, **kw)

    def open_stream(self, path: str, fields: Dict[str, object]):
        """POST ``fields`` as multipart and return the live response.

        The body is left unread so the caller can consume it incrementally;
        the caller owns the response and must close it.  A non-2xx answer
        is classified and raised before any of the body is handed out, and so
        is a JSON envelope sent in place of the event stream.
        """

        body, ctype = encode_multipart(fields)
        headers = self._headers(accept="text/event-stream")
        headers["Content-Type"] = ctype
        req = Request(url=self.url_for(path), method="POST", headers=headers, data=body)
        logger.debug("POST %s (stream, %d bytes)", req.full_url, len(body))
        resp = self._open(req, self.stream_timeout)
        status = getattr(resp, "status", None) or 200
        if not 200 <= status < 300:
            try:
                err_body = resp.read()
            except OSError:
                err_body = b""
            finally:
                resp.close()
            raise self.fail(classify_status(status, err_body))
        ctype = (resp.headers.get("Content-Type") or "").lower()
        if "application/json" in ctype:
            # Rejected uploads come back as a plain envelope instead of a stream.
            try:
                with resp:
                    err_body = resp.read()
            except OSError as e:
                raise self.fail(classify_status(None)) from e
            try:
                decoded = json.loads(err_body.decode("utf-8"))
            except ValueError:
                decoded = None
            err = classify_envelope(decoded, status)
            if err is None:
                err = ClassifiedError(ErrorKind.UNKNOWN, "Unexpected response to a streaming request", status)
            raise self.fail(err)
        return resp
