"""HTTP access to the properties blob addressed by URL plus SAS token."""

from __future__ import annotations

import socket
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as WaitTimeout
from contextlib import contextmanager
from typing import Callable, Iterator, Optional
from urllib.parse import urlsplit, urlunsplit

import requests
from urllib3.exceptions import ReadTimeoutError

from ..utils.logging import get_logger
from .errors import BlobNotFoundError, FetchTimeoutError, TransientIOError

LOGGER = get_logger("db.blob_client")

PROBE_TIMEOUT = 30  # seconds; metadata calls should be quick
CONNECT_TIMEOUT = 30
READ_TIMEOUT = 60  # longest a single socket read may stall
DOWNLOAD_CHUNK = 64 * 1024


def redact(url: str) -> str:
    """Drop the query string so SAS tokens never reach the logs."""

    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


class Deadline:
    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self.seconds = seconds
        self._clock = clock
        self._expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(self._expires_at - self._clock(), 0.0)

    def expired(self) -> bool:
        return self._expires_at - self._clock() <= 0

    def check(self) -> float:
        if self.expired():
            raise FetchTimeoutError(self.seconds)
        return self.remaining()


def _is_timeout(exc: Optional[BaseException]) -> bool:
    # requests re-raises urllib3 read timeouts as ConnectionError during body reads
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if isinstance(exc, (requests.Timeout, ReadTimeoutError, socket.timeout)):
            return True
        nested = exc.args[0] if exc.args and isinstance(exc.args[0], BaseException) else None
        exc = nested or exc.__cause__ or exc.__context__
    return False


def _abort(r: requests.Response) -> None:
    """Shut the socket under a blocked read so the reader thread lets go of it."""

    sock = getattr(getattr(r.raw, "connection", None), "sock", None)
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        pass  # already closed by the peer


class BlobClient:
    def __init__(self, url: str, session: Optional[requests.Session] = None):
        self.url = url
        self.session = session or requests.Session()
        self.display_url = redact(url)

    def get_size(self) -> int:
        """Return the blob's byte length from a HEAD request; no body is read."""

        try:
            r = self.session.head(self.url, timeout=PROBE_TIMEOUT, allow_redirects=True)
        except requests.RequestException as exc:
            raise TransientIOError(f"HEAD {self.display_url} failed: {exc}") from exc
        if r.status_code == 404:
            raise BlobNotFoundError(f"Blob not found at {self.display_url}")
        self._check_status(r)
        length = r.headers.get("Content-Length")
        try:
            return int(length)
        except (TypeError, ValueError):
            raise TransientIOError(
                f"Blob at {self.display_url} returned no usable Content-Length ({length!r})"
            ) from None

    def download(self, deadline: Deadline) -> bytes:
        """Fetch the whole body into memory, still bounded by ``deadline``."""

        with self.open_stream(DOWNLOAD_CHUNK, deadline) as chunks:
            return b"".join(chunks)

    @contextmanager
    def open_stream(self, chunk_size: int, deadline: Deadline) -> Iterator[Iterator[bytes]]:
        """Open a streaming GET and yield an iterator over ``chunk_size`` pieces.

        Every read waits at most until ``deadline``; a read still blocked then
        is abandoned and the response closed, so a slow trickle of bytes cannot
        hold the caller past its budget. The connection is released when the
        ``with`` block exits, whether the body was fully consumed or not.
        """

        remaining = deadline.check()
        timeout = (min(remaining, CONNECT_TIMEOUT), min(remaining, READ_TIMEOUT))
        try:
            r = self.session.get(self.url, stream=True, timeout=timeout)
        except requests.RequestException as exc:
            raise self._translate(exc, deadline, "GET") from exc
        reader = ThreadPoolExecutor(max_workers=1, thread_name_prefix="blob_read")
        try:
            if r.status_code == 404:
                raise BlobNotFoundError(f"Blob not found at {self.display_url}")
            self._check_status(r)
            yield self._iter_chunks(r, chunk_size, deadline, reader)
        finally:
            r.close()
            reader.shutdown(wait=False)

    def _iter_chunks(
        self,
        r: requests.Response,
        chunk_size: int,
        deadline: Deadline,
        reader: ThreadPoolExecutor,
    ) -> Iterator[bytes]:
        pieces = r.iter_content(chunk_size=chunk_size)
        while True:
            pending = reader.submit(next, pieces, None)
            try:
                chunk = pending.result(timeout=deadline.remaining())
            except WaitTimeout:
                LOGGER.warning("blob_read_abandoned url=%s timeout_s=%.0f", self.display_url, deadline.seconds)
                _abort(r)
                raise FetchTimeoutError(deadline.seconds) from None
            except requests.RequestException as exc:
                raise self._translate(exc, deadline, "Stream from") from exc
            if chunk is None:
                return
            if chunk:
                yield chunk

    def _translate(self, exc: requests.RequestException, deadline: Deadline, action: str) -> Exception:
        if _is_timeout(exc) or deadline.expired():
            return FetchTimeoutError(deadline.seconds)
        return TransientIOError(f"{action} {self.display_url} failed: {exc}")

    def _check_status(self, r: requests.Response) -> None:
        try:
            r.raise_for_status()
        except requests.HTTPError as exc:
            raise TransientIOError(f"{self.display_url} answered HTTP {r.status_code}") from exc
