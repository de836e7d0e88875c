"""Queued HTTP GET requests served one after another on a worker thread."""

from __future__ import annotations

import collections
import contextlib
import http.client
import logging
import os
import shutil
import threading
import urllib.error
import urllib.parse
import urllib.request
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum, auto
from typing import IO, Callable, Optional, Union

from .singleton import Singleton

_LOGGER = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "ArcdpsExtension/1.0"


class ErrorType(Enum):
    """Stage at which a request failed."""

    PERFORM_ERROR = auto()
    OPT_URL_ERROR = auto()
    OPT_FOLLOW_LOCATION_ERROR = auto()
    OPT_WRITE_FUNC_ERROR = auto()
    OPT_WRITE_DATA_ERROR = auto()
    OPT_USERAGENT_ERROR = auto()


@dataclass(frozen=True)
class Response:
    """A completed request; ``body`` is empty when it was saved to a file."""

    body: bytes
    code: int

    @property
    def message(self) -> str:
        """The body decoded as UTF-8."""
        return self.body.decode("utf-8", errors="replace")


class NetworkError(Exception):
    """A request that produced no HTTP response."""

    def __init__(self, type: ErrorType, message: str) -> None:
        super().__init__(f"{type.name}: {message}")
        self.type = type
        self.message = message


Result = Union[Response, NetworkError]
ResultCallback = Callable[[Result], object]


@dataclass
class _Job:
    url: str
    callback: Union[ResultCallback, "Future[Response]", None]
    filepath: Optional[str]


class SimpleNetworkStack(Singleton):
    """Performs GET requests in the order they were queued.

    A request's outcome goes to a callable, which receives a ``Response`` or
    a ``NetworkError``, or to a ``concurrent.futures.Future``, which gets the
    ``Response`` as result or the ``NetworkError`` as exception. Redirects
    are followed; any HTTP status counts as a response.
    """

    def __init__(self) -> None:
        self.user_agent = DEFAULT_USER_AGENT
        self.timeout: Optional[float] = None
        self._jobs: collections.deque[_Job] = collections.deque()
        self._cond = threading.Condition()
        self._stopped = False
        self._thread = threading.Thread(target=self._run, name="SimpleNetworkStack", daemon=True)
        self._thread.start()

    def __enter__(self) -> SimpleNetworkStack:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def queue_get(self, url: str, callback=None, filepath=None) -> None:
        """Queue a GET of ``url``; with ``filepath`` the body is saved there."""
        path = os.fspath(filepath) if filepath else None
        with self._cond:
            if self._stopped:
                raise RuntimeError("the network stack has been shut down")
            self._jobs.append(_Job(url, callback, path))
            self._cond.notify()

    def url_encode(self, text: str) -> str:
        """Percent-encode everything except unreserved URL characters."""
        return urllib.parse.quote(text, safe="")

    def shutdown(self) -> None:
        """Stop the worker; requests not yet started are dropped."""
        with self._cond:
            self._stopped = True
            dropped = list(self._jobs)
            self._jobs.clear()
            self._cond.notify_all()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join()
        for job in dropped:
            if isinstance(job.callback, Future):
                job.callback.cancel()

    def _release(self) -> None:
        self.shutdown()

    def _run(self) -> None:
        while True:
            with self._cond:
                self._cond.wait_for(lambda: self._jobs or self._stopped)
                if self._stopped:
                    return
                job = self._jobs.popleft()
            self._deliver(job, self._get(job))

    @staticmethod
    def _deliver(job: _Job, result: Result) -> None:
        target = job.callback
        if target is None:
            return
        if isinstance(target, Future):
            if target.set_running_or_notify_cancel():
                if isinstance(result, NetworkError):
                    target.set_exception(result)
                else:
                    target.set_result(result)
            return
        try:
            target(result)
        except Exception:
            _LOGGER.exception("callback for %s failed", job.url)

    def _get(self, job: _Job) -> Result:
        try:
            request = urllib.request.Request(job.url)
        except ValueError as exc:
            return NetworkError(ErrorType.OPT_URL_ERROR, str(exc))
        if "\r" in self.user_agent or "\n" in self.user_agent:
            return NetworkError(ErrorType.OPT_USERAGENT_ERROR, "user agent contains a line break")
        request.add_header("User-Agent", self.user_agent)

        sink: Optional[IO[bytes]] = None
        if job.filepath is not None:
            try:
                sink = open(job.filepath, "wb")
            except OSError as exc:
                return NetworkError(ErrorType.OPT_WRITE_DATA_ERROR, str(exc))

        try:
            with sink if sink is not None else contextlib.nullcontext():
                code, body = self._fetch(request, sink)
        except NetworkError as err:
            return err
        return Response(body, code)

    def _fetch(self, request: urllib.request.Request, sink: Optional[IO[bytes]]) -> tuple[int, bytes]:
        try:
            response = urllib.request.urlopen(request, timeout=self.timeout)
        except urllib.error.HTTPError as exc:
            response = exc
        except urllib.error.URLError as exc:
            raise NetworkError(ErrorType.PERFORM_ERROR, str(exc.reason)) from exc
        except (OSError, ValueError, http.client.HTTPException) as exc:
            raise NetworkError(ErrorType.PERFORM_ERROR, str(exc)) from exc

        try:
            with response:
                code = response.getcode()
                if response.fp is None:
                    return code, b""
                if sink is not None:
                    shutil.copyfileobj(response, sink)
                    return code, b""
                return code, response.read()
        except (OSError, http.client.HTTPException) as exc:
            raise NetworkError(ErrorType.PERFORM_ERROR, str(exc)) from exc