"""
HTTP client for a todo server.

One request per call, no retries. Every method either returns
``(status, payload)`` or raises:

- ApiHTTPError: the server answered with a non-success status
- ApiRequestError: the request never produced a usable answer (DNS failure,
  refused connection, timeout, unreadable body)
"""

import json
import logging
import socket
import ssl
import urllib.error
import urllib.request
from typing import Any, Optional

import certifi

from todolist.config import DEFAULT_PORT
from todolist.store import Task

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class ApiError(Exception):
    """Base class for transport-level failures."""


class ApiHTTPError(ApiError):
    def __init__(self, status: int, body: str = ""):
        super().__init__(f"HTTP {status}")
        self.status = status
        self.body = body


class ApiRequestError(ApiError):
    def __init__(self, cause):
        super().__init__(str(cause))
        self.cause = cause


def _get_ssl_context() -> ssl.SSLContext:
    """SSL context using certifi's CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


class RemoteClient:
    """
    Binding to a todo server at ``host:port``.

    ``host`` may carry a scheme (``https://todo.example.com``); without one the
    server is contacted over plain HTTP.
    """

    def __init__(self, host: str, port: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT):
        self.host = host
        self.port = str(port or DEFAULT_PORT)
        self.timeout = timeout

        if '://' in host:
            self.base_url = f"{host.rstrip('/')}:{self.port}"
        else:
            self.base_url = f"http://{host.rstrip('/')}:{self.port}"

        self._ssl_context = _get_ssl_context() if self.base_url.startswith('https://') else None

    def __repr__(self) -> str:
        return f"RemoteClient({self.base_url!r})"

    def _request(self, method: str, path: str, data: Any = None) -> tuple[int, Any]:
        """Issue one request and decode the JSON reply."""
        url = f"{self.base_url}{path}"
        body = None
        headers = {'Accept': 'application/json', 'User-Agent': 'todo'}
        if data is not None:
            body = json.dumps(data).encode('utf-8')
            headers['Content-Type'] = 'application/json'

        req = urllib.request.Request(url, data=body, headers=headers, method=method)
        logger.debug(f"{method} {url} {data!r}")

        try:
            with urllib.request.urlopen(req, timeout=self.timeout, context=self._ssl_context) as response:
                status = response.status
                raw = response.read()
        except urllib.error.HTTPError as e:
            try:
                detail = e.read().decode('utf-8', errors='replace')
            except OSError:
                detail = ""
            logger.debug(f"{method} {url} -> {e.code}")
            raise ApiHTTPError(e.code, detail) from e
        except (urllib.error.URLError, socket.timeout, OSError, ValueError) as e:
            logger.debug(f"{method} {url} failed: {e}")
            raise ApiRequestError(e) from e

        logger.debug(f"{method} {url} -> {status}")
        if not raw:
            return status, None
        try:
            return status, json.loads(raw.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ApiRequestError(f"invalid JSON response: {e}") from e

    @staticmethod
    def _task(payload: Any) -> Task:
        try:
            return Task.from_dict(payload)
        except (KeyError, TypeError, AttributeError) as e:
            raise ApiRequestError(f"malformed task payload: {payload!r}") from e

    # ========================================================================
    # Endpoints
    # ========================================================================

    def get(self) -> tuple[int, list]:
        """GET /tasks"""
        status, payload = self._request('GET', '/tasks')
        if not isinstance(payload, list):
            raise ApiRequestError(f"expected a task list, got {payload!r}")
        return status, [self._task(item) for item in payload]

    def add(self, name: str) -> tuple[int, Task]:
        """POST /add with the task name; returns the created task."""
        status, payload = self._request('POST', '/add', name)
        return status, self._task(payload)

    def get_index(self, name: str) -> tuple[int, int]:
        """GET /index with the task name; a 404 means no such task."""
        status, payload = self._request('GET', '/index', name)
        if not isinstance(payload, int) or isinstance(payload, bool):
            raise ApiRequestError(f"expected an index, got {payload!r}")
        return status, payload

    def remove(self, index: int) -> tuple[int, Any]:
        """DELETE /remove with the task position."""
        return self._request('DELETE', '/remove', index)

    def done(self, index: int) -> tuple[int, Task]:
        status, payload = self._request('POST', '/done', index)
        return status, self._task(payload)

    def undone(self, index: int) -> tuple[int, Task]:
        status, payload = self._request('POST', '/undone', index)
        return status, self._task(payload)

    def clear(self) -> tuple[int, Any]:
        return self._request('DELETE', '/clear')

    def clear_done(self) -> tuple[int, Any]:
        return self._request('DELETE', '/cleardone')
