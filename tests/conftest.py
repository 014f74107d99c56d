import sys
import threading
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from bkkms_cli.core.http import Transport
from bkkms_cli.core.session import SessionState
from bkkms_cli.core.storage import CredentialStore


class FakeResponse:
    """Stand-in for the object returned by ``urlopen``.

    ``chunks`` are handed out one per ``read1`` call; an ``Exception``
    instance in the list is raised instead of returned.
    """

    def __init__(self, body=b"", *, ctype="application/json", status=200, chunks=None):
        self.headers = {"Content-Type": ctype}
        self.status = status
        self._body = body
        self._chunks = list(chunks) if chunks is not None else None
        self.closed = False
        self.reads = 0

    def read(self, n=-1):
        if self._chunks is not None:
            return self.read1(n)
        body, self._body = self._body, b""
        return body

    def read1(self, n=-1):
        self.reads += 1
        if self.closed or not self._chunks:
            return b""
        item = self._chunks.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class BlockingStreamResponse(FakeResponse):
    """Streams ``first`` and then blocks until closed."""

    def __init__(self, first):
        super().__init__(ctype="text/event-stream", chunks=[first])
        self._released = threading.Event()

    def read1(self, n=-1):
        if self._chunks:
            return super().read1(n)
        self.reads += 1
        self._released.wait(timeout=5)
        return b""

    def close(self):
        super().close()
        self._released.set()


@pytest.fixture
def store(tmp_path):
    return CredentialStore(tmp_path / "session.json")


@pytest.fixture
def session(store):
    return SessionState(store)


@pytest.fixture
def notices():
    return []


@pytest.fixture
def redirects():
    return []


@pytest.fixture
def transport(session, notices, redirects):
    return Transport(
        "http://svc.test",
        session,
        notify=notices.append,
        on_unauthorized=lambda: redirects.append(1),
    )
