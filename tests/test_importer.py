import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from io import BytesIO
from urllib.error import HTTPError

import pytest

from bkkms_cli.core.errors import BusinessError, ClassifiedError, ErrorKind
from bkkms_cli.core.http import Transport
from bkkms_cli.core.importer import IMPORT_PATH, ImportStream, import_bookmarks, start_import
from bkkms_cli.core.models import EventKind, ImportOptions

from conftest import BlockingStreamResponse, FakeResponse


def frame(**event):
    return f"data: {json.dumps(event)}\n\n".encode("utf-8")


EVENTS = [
    frame(type="progress", message="parsing", current=0, total=2),
    frame(type="success", message="saved", current=1, total=2, url="https://a.example"),
    frame(type="success", message="saved", current=2, total=2, url="https://b.example"),
    frame(type="complete", message="done", current=2, total=2),
]

OPTIONS = ImportOptions(content=b"<DL><DT>x</DL>", filename="export.html", generate_tags=True)


def stream_response(chunks):
    return FakeResponse(ctype="text/event-stream", chunks=chunks)


@pytest.fixture
def serve(monkeypatch):
    """Install a fake ``urlopen`` that answers the import with ``resp``."""
    calls = []

    def install(resp):
        def fake_urlopen(req, timeout=None):
            calls.append((req, timeout))
            if isinstance(resp, Exception):
                raise resp
            return resp

        monkeypatch.setattr("bkkms_cli.core.http.urlopen", fake_urlopen)
        return calls

    return install


def test_upload_is_multipart_with_flags(serve, transport, session):
    session.set_token("abc")
    calls = serve(stream_response([b"".join(EVENTS)]))
    import_bookmarks(transport, OPTIONS, lambda ev: None)

    (req, timeout), = calls
    assert req.full_url == f"http://svc.test{IMPORT_PATH}"
    assert req.get_method() == "POST"
    assert req.get_header("Authorization") == "Bearer abc"
    assert req.get_header("Content-type").startswith("multipart/form-data; boundary=")
    assert timeout == transport.stream_timeout
    body = req.data
    assert b'name="bookmark_file"; filename="export.html"' in body
    assert b"<DL><DT>x</DL>" in body
    assert b'name="generate_tag"\r\n\r\ntrue\r\n' in body
    assert b'name="create_archive"\r\n\r\nfalse\r\n' in body


def test_events_dispatched_in_order_across_chunks(serve, transport):
    raw = b"".join(EVENTS)
    resp = stream_response([raw[:7], raw[7:50], raw[50:51], raw[51:]])
    serve(resp)
    seen = []
    stream = import_bookmarks(transport, OPTIONS, seen.append)

    assert [e.kind for e in seen] == [
        EventKind.PROGRESS,
        EventKind.SUCCESS,
        EventKind.SUCCESS,
        EventKind.COMPLETE,
    ]
    assert [e.current for e in seen] == [0, 1, 2, 2]
    assert stream.completed
    assert stream.total == 2
    assert stream.dispatched == 4
    assert not stream.cancelled
    assert resp.closed


def test_malformed_frame_does_not_stop_stream(serve, transport):
    serve(stream_response([EVENTS[0], b"data: {oops\n\n", EVENTS[1], EVENTS[3]]))
    seen = []
    import_bookmarks(transport, OPTIONS, seen.append)
    assert [e.kind for e in seen] == [EventKind.PROGRESS, EventKind.SUCCESS, EventKind.COMPLETE]


def test_end_without_complete_returns_normally(serve, transport, notices):
    resp = stream_response(EVENTS[:2])
    serve(resp)
    seen = []
    stream = import_bookmarks(transport, OPTIONS, seen.append)
    assert len(seen) == 2
    assert not stream.completed
    assert resp.closed
    assert notices == []


def test_http_error_before_stream_emits_nothing(serve, transport, notices):
    serve(HTTPError("http://svc.test", 500, "boom", None, BytesIO(b'{"code":500,"msg":"parse failed"}')))
    seen = []
    with pytest.raises(ClassifiedError) as exc:
        import_bookmarks(transport, OPTIONS, seen.append)
    assert exc.value.kind is ErrorKind.SERVER_ERROR
    assert exc.value.message == "parse failed"
    assert seen == []
    assert notices == [exc.value]


def test_non_2xx_response_object_is_rejected(serve, transport):
    resp = FakeResponse(b"", ctype="text/plain", status=304)
    serve(resp)
    seen = []
    with pytest.raises(ClassifiedError) as exc:
        import_bookmarks(transport, OPTIONS, seen.append)
    assert exc.value.kind is ErrorKind.UNKNOWN
    assert exc.value.http_status == 304
    assert seen == []
    assert resp.closed


def test_unauthorized_import_clears_session(serve, transport, session, redirects):
    session.set_token("stale")
    serve(HTTPError("http://svc.test", 401, "Unauthorized", None, BytesIO(b"")))
    with pytest.raises(ClassifiedError) as exc:
        import_bookmarks(transport, OPTIONS, lambda ev: None)
    assert exc.value.kind is ErrorKind.UNAUTHORIZED
    assert session.get_token() == ""
    assert redirects == [1]


def test_interruption_mid_stream_is_terminal(serve, transport, notices):
    resp = stream_response([EVENTS[0], EVENTS[1], ConnectionResetError("reset by peer"), EVENTS[2]])
    serve(resp)
    seen = []
    with pytest.raises(ClassifiedError) as exc:
        import_bookmarks(transport, OPTIONS, seen.append)
    assert exc.value.kind is ErrorKind.NETWORK
    assert [e.current for e in seen] == [0, 1]
    assert resp.closed
    assert notices == [exc.value]


def test_cancel_stops_dispatch_and_closes_reader(serve, transport):
    resp = stream_response(list(EVENTS))
    serve(resp)
    stream = ImportStream(transport, OPTIONS)
    seen = []
    for event in stream:
        seen.append(event)
        stream.cancel()
    assert len(seen) == 1
    assert stream.cancelled
    assert resp.closed


def test_close_from_consumer_releases_reader(serve, transport):
    resp = stream_response(list(EVENTS))
    serve(resp)
    with ImportStream(transport, OPTIONS) as stream:
        first = next(iter(stream))
    assert first.kind is EventKind.PROGRESS
    assert stream.cancelled
    assert resp.closed


def test_stream_can_only_be_consumed_once(serve, transport):
    serve(stream_response(list(EVENTS)))
    stream = ImportStream(transport, OPTIONS)
    list(stream)
    with pytest.raises(RuntimeError):
        iter(stream)


def test_job_delivers_events_through_queue(serve, transport):
    serve(stream_response(list(EVENTS)))
    job = start_import(transport, OPTIONS, max_pending=1)
    kinds = [e.kind for e in job.events()]
    assert kinds == [EventKind.PROGRESS, EventKind.SUCCESS, EventKind.SUCCESS, EventKind.COMPLETE]
    assert job.result(timeout=5).completed


def test_job_reraises_terminal_failure(serve, transport):
    serve(stream_response([EVENTS[0], OSError("gone")]))
    job = start_import(transport, OPTIONS)
    seen = []
    with pytest.raises(ClassifiedError) as exc:
        for event in job.events():
            seen.append(event)
    assert exc.value.kind is ErrorKind.NETWORK
    assert len(seen) == 1


def test_job_cancel_mid_flight(serve, transport):
    resp = BlockingStreamResponse(EVENTS[0])
    serve(resp)
    job = start_import(transport, OPTIONS)
    seen = []
    for event in job.events():
        seen.append(event)
        job.cancel()
    stream = job.result(timeout=5)
    assert len(seen) == 1
    assert stream.cancelled
    assert resp.closed


def test_rejected_upload_envelope_is_a_business_error(serve, transport, notices):
    resp = FakeResponse(json.dumps({"code": 1, "msg": "no valid bookmarks found", "data": None}).encode("utf-8"))
    serve(resp)
    seen = []
    with pytest.raises(BusinessError) as exc:
        import_bookmarks(transport, OPTIONS, seen.append)
    assert exc.value.message == "no valid bookmarks found"
    assert exc.value.code == 1
    assert seen == []
    assert notices == [exc.value]
    assert resp.closed


def test_json_answer_without_error_code_is_unexpected(serve, transport, notices):
    serve(FakeResponse(b'{"code": 0, "msg": "", "data": null}'))
    with pytest.raises(ClassifiedError) as exc:
        import_bookmarks(transport, OPTIONS, lambda ev: None)
    assert exc.value.kind is ErrorKind.UNKNOWN
    assert len(notices) == 1



class StallingImportHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.0"
    release = None

    def do_POST(self):
        self.rfile.read(int(self.headers.get("Content-Length") or 0))
        self.send_response(200)
        self.send_header("Content-Type", "text/event-stream")
        self.end_headers()
        self.wfile.write(EVENTS[0])
        self.wfile.flush()
        self.release.wait(10)

    def log_message(self, *args):
        pass


@pytest.fixture
def stalling_server():
    release = threading.Event()
    handler = type("Handler", (StallingImportHandler,), {"release": release})
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    release.set()
    server.shutdown()
    server.server_close()


def test_cancel_unblocks_a_stalled_read(stalling_server, session, notices):
    transport = Transport(stalling_server, session, timeout=5, stream_timeout=30, notify=notices.append)
    job = start_import(transport, OPTIONS)
    events = job.events()
    assert next(events).kind is EventKind.PROGRESS

    started = time.monotonic()
    job.cancel()
    stream = job.result(timeout=5)
    assert time.monotonic() - started < 2.0
    assert stream.cancelled
    assert notices == []
