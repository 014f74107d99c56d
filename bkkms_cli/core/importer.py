"""Client for the streaming bulk-import endpoint.

The upload is a multipart POST; the answer is a long-lived body of
``data: <json>`` lines that report per-bookmark progress while the server
works.  :class:`ImportStream` turns that body into :class:`ImportEvent`
objects as chunks arrive.  :class:`ImportJob` runs a stream on a worker
thread and hands the events over through a bounded queue.
"""

from __future__ import annotations

import logging
import queue
import socket
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from http.client import HTTPException
from typing import Callable, Dict, Iterator, Optional

from .errors import ClassifiedError, ErrorKind
from .framing import LineFramer, parse_event_line
from .http import Transport
from .models import EventKind, ImportEvent, ImportOptions

logger = logging.getLogger(__name__)

IMPORT_PATH = "/api/v1/bookmarks/import"
CHUNK_SIZE = 8192

Sink = Callable[[ImportEvent], None]


def import_fields(options: ImportOptions) -> Dict[str, object]:
    return {
        "bookmark_file": (options.filename, options.content, "text/html"),
        "generate_tag": "true" if options.generate_tags else "false",
        "create_archive": "true" if options.create_archive else "false",
    }


def _shutdown_socket(resp) -> None:
    raw = getattr(getattr(resp, "fp", None), "raw", None)
    sock = getattr(raw, "_sock", None)
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as e:
        logger.debug("Error while shutting down import socket: %s", e)


class ImportStream:
    """One bulk import, consumed by iterating over it.

    Iteration uploads the file, then yields events in arrival order until
    the body ends.  The stream can be iterated once.  :meth:`cancel` may be
    called from any thread; it stops further reads, closes the response and
    guarantees no more events are yielded.  The response is closed on every
    exit path.
    """

    def __init__(self, transport: Transport, options: ImportOptions, *, chunk_size: int = CHUNK_SIZE):
        self.transport = transport
        self.options = options
        self.chunk_size = chunk_size
        self.current = 0
        self.total = 0
        self.completed = False
        self.dispatched = 0
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._response = None
        self._iterator: Optional[Iterator[ImportEvent]] = None
        self._finished = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def __iter__(self) -> Iterator[ImportEvent]:
        if self._iterator is not None:
            raise RuntimeError("an import stream can only be consumed once")
        self._iterator = self._run()
        return self._iterator

    def __enter__(self) -> "ImportStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def cancel(self) -> None:
        if self._cancelled.is_set():
            return
        self._cancelled.set()
        logger.info("Import cancelled")
        self._release()

    def close(self) -> None:
        """Stop the stream if it is still running; call from the consuming thread."""
        if not self._finished:
            self.cancel()
        if self._iterator is not None:
            self._iterator.close()

    def _release(self) -> None:
        with self._lock:
            resp, self._response = self._response, None
        if resp is not None:
            # close() waits on a read blocked in another thread; end the read first.
            _shutdown_socket(resp)
            try:
                resp.close()
            except OSError as e:
                logger.debug("Error while closing import response: %s", e)

    def _read(self, resp) -> bytes:
        reader = getattr(resp, "read1", None) or resp.read
        return reader(self.chunk_size)

    def _track(self, event: ImportEvent) -> None:
        if event.current < self.current:
            logger.warning("Import progress went backwards: %d -> %d", self.current, event.current)
        self.current = max(self.current, event.current)
        if event.total:
            if self.total and event.total != self.total:
                logger.warning("Import total changed: %d -> %d", self.total, event.total)
            else:
                self.total = event.total
        if event.kind is EventKind.COMPLETE:
            self.completed = True
        self.dispatched += 1

    def _run(self) -> Iterator[ImportEvent]:
        if self.cancelled:
            return
        framer = LineFramer()
        try:
            resp = self.transport.open_stream(IMPORT_PATH, import_fields(self.options))
            with self._lock:
                self._response = resp
            while not self.cancelled:
                try:
                    chunk = self._read(resp)
                except (OSError, HTTPException, ValueError) as e:
                    if self.cancelled:
                        return
                    logger.debug("Import stream interrupted: %s", e)
                    raise self.transport.fail(ClassifiedError(ErrorKind.NETWORK)) from e
                if self.cancelled:
                    return
                lines = framer.feed(chunk) if chunk else framer.flush()
                for line in lines:
                    event = parse_event_line(line)
                    if event is None:
                        continue
                    if self.cancelled:
                        return
                    self._track(event)
                    yield event
                if not chunk:
                    break
            if not self.cancelled and not self.completed:
                logger.info("Import stream ended without a complete event")
        finally:
            self._finished = True
            self._release()


def import_bookmarks(
    transport: Transport,
    options: ImportOptions,
    sink: Sink,
    *,
    chunk_size: int = CHUNK_SIZE,
) -> ImportStream:
    """Run an import to the end, calling ``sink`` for every event.

    Returns the finished stream so callers can inspect ``completed`` and the
    final counters.
    """
    with ImportStream(transport, options, chunk_size=chunk_size) as stream:
        for event in stream:
            sink(event)
    return stream


_DONE = object()


class ImportJob:
    """An import running on a worker thread.

    Events are passed through a bounded queue; when the consumer falls
    behind the producer blocks instead of buffering the whole stream.
    """

    def __init__(
        self,
        transport: Transport,
        options: ImportOptions,
        *,
        max_pending: int = 64,
        chunk_size: int = CHUNK_SIZE,
        poll_interval: float = 0.1,
    ):
        self.stream = ImportStream(transport, options, chunk_size=chunk_size)
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=max_pending)
        self._poll = poll_interval
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="bkkms-import")
        self.future: Future = executor.submit(self._produce)
        # Already submitted work still runs; this only frees the thread after.
        executor.shutdown(wait=False)

    def _put(self, item: object) -> bool:
        while not self.stream.cancelled:
            try:
                self._queue.put(item, timeout=self._poll)
                return True
            except queue.Full:
                continue
        return False

    def _produce(self) -> ImportStream:
        try:
            for event in self.stream:
                if not self._put(event):
                    break
        finally:
            try:
                self._queue.put_nowait(_DONE)
            except queue.Full:
                pass
        return self.stream

    def events(self) -> Iterator[ImportEvent]:
        """Yield events in arrival order, then re-raise a terminal failure."""
        while True:
            try:
                item = self._queue.get(timeout=self._poll)
            except queue.Empty:
                if self.future.done() and self._queue.empty():
                    break
                continue
            if item is _DONE or self.stream.cancelled:
                break
            yield item  # type: ignore[misc]
        self.result()

    def cancel(self) -> None:
        self.stream.cancel()

    def result(self, timeout: Optional[float] = None) -> ImportStream:
        return self.future.result(timeout)


def start_import(transport: Transport, options: ImportOptions, **kw) -> ImportJob:
    return ImportJob(transport, options, **kw)
