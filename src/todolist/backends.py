"""
Task backends.

Two interchangeable implementations of the same six operations:

1. LOCAL: mutate the task list loaded from the data file, then save it
2. REMOTE: drive a todo server through RemoteClient

Both validate a whole batch before changing anything and raise the same
CommandError subclasses, so callers never need to know which one they hold.

Usage:
    backend = open_backend(store, connection)
    backend.add(['buy milk'])
    for task in backend.list_tasks():
        ...
"""

import logging
from typing import Optional

from todolist.client import ApiHTTPError, ApiRequestError, RemoteClient
from todolist.config import ConfigError, ConnectionConfig
from todolist.errors import (
    DataError,
    DuplicateInputError,
    EmptyTaskNameError,
    HTTPStatusError,
    NoTasksSpecifiedError,
    ServerConnectionError,
    TaskExistsError,
    TaskNotFoundError,
)
from todolist.store import StoreError, Task, TaskStore, find_index

logger = logging.getLogger(__name__)


class Backend:
    """Interface shared by the local and remote backends."""

    mode = 'unknown'

    def add(self, names: list):
        raise NotImplementedError

    def remove(self, names: list):
        raise NotImplementedError

    def done(self, names: list):
        raise NotImplementedError

    def undone(self, names: list):
        raise NotImplementedError

    def clear(self, done_only: bool = False):
        raise NotImplementedError

    def list_tasks(self) -> list:
        raise NotImplementedError

    @staticmethod
    def _check_batch(names: list):
        """Check the shape of a batch before touching the store or the server."""
        if not names:
            raise NoTasksSpecifiedError()
        seen = set()
        for name in names:
            if not name:
                raise EmptyTaskNameError()
            if name in seen:
                raise DuplicateInputError(name)
            seen.add(name)


# ============================================================================
# Local Backend
# ============================================================================

class LocalBackend(Backend):
    """Operates on a TaskStore that the caller has already loaded."""

    mode = 'local'

    def __init__(self, store: TaskStore):
        self.store = store

    def _find(self, name: str) -> Optional[int]:
        return find_index(self.store.get_tasks(), name)

    def _require_all(self, names: list):
        for name in names:
            if self._find(name) is None:
                raise TaskNotFoundError(name)

    def _save(self):
        try:
            self.store.save()
        except StoreError as e:
            raise DataError('tasks', e) from e

    def add(self, names: list):
        self._check_batch(names)
        for name in names:
            if self._find(name) is not None:
                raise TaskExistsError(name)

        for name in names:
            self.store.append(Task(name=name, done=False))
        logger.debug(f"Added {len(names)} task(s) locally")
        self._save()

    def remove(self, names: list):
        self._check_batch(names)
        self._require_all(names)

        # Positions shift after each removal, so look each one up again.
        for name in names:
            self.store.remove_at(self._find(name))
        logger.debug(f"Removed {len(names)} task(s) locally")
        self._save()

    def _mark(self, names: list, done: bool):
        self._check_batch(names)
        self._require_all(names)

        for name in names:
            self.store.set_done_at(self._find(name), done)
        self._save()

    def done(self, names: list):
        self._mark(names, True)

    def undone(self, names: list):
        self._mark(names, False)

    def clear(self, done_only: bool = False):
        if done_only:
            removed = self.store.retain_not_done()
        else:
            removed = self.store.clear_all()
        logger.debug(f"Cleared {removed} task(s) locally (done_only={done_only})")
        self._save()

    def list_tasks(self) -> list:
        return [Task(name=t.name, done=t.done) for t in self.store.get_tasks()]


# ============================================================================
# Remote Backend
# ============================================================================

class RemoteBackend(Backend):
    """
    Same contract as LocalBackend, one HTTP round trip per check and mutation.

    The server has no "does this exist" call, so existence is read off the
    index endpoint: success means present, 404 means absent.

    Only validation is all-or-nothing. Once the mutation phase starts each name
    is applied on its own, and a failure part way leaves earlier names applied.
    """

    mode = 'remote'

    def __init__(self, client: RemoteClient):
        self.client = client

    def _exists(self, name: str) -> bool:
        try:
            self.client.get_index(name)
        except ApiHTTPError as e:
            if e.status == 404:
                return False
            raise HTTPStatusError(name, e.status) from e
        except ApiRequestError as e:
            raise ServerConnectionError(name) from e
        return True

    def _resolve(self, name: str) -> int:
        """Current position of ``name`` on the server."""
        try:
            _, index = self.client.get_index(name)
        except ApiHTTPError as e:
            if e.status == 404:
                raise TaskNotFoundError(name) from e
            raise HTTPStatusError(name, e.status) from e
        except ApiRequestError as e:
            raise ServerConnectionError(name) from e
        return index

    def _call(self, name: str, func, *args, not_found_is_missing: bool = False):
        try:
            return func(*args)
        except ApiHTTPError as e:
            if not_found_is_missing and e.status == 404:
                raise TaskNotFoundError(name) from e
            raise HTTPStatusError(name, e.status) from e
        except ApiRequestError as e:
            raise ServerConnectionError(name) from e

    def _require_all(self, names: list):
        for name in names:
            if not self._exists(name):
                raise TaskNotFoundError(name)

    def add(self, names: list):
        self._check_batch(names)
        for name in names:
            if self._exists(name):
                raise TaskExistsError(name)

        for name in names:
            self._call(name, self.client.add, name)
            logger.debug(f"Added task {name!r} on {self.client.base_url}")

    def remove(self, names: list):
        self._check_batch(names)
        self._require_all(names)

        for name in names:
            index = self._resolve(name)
            self._call(name, self.client.remove, index, not_found_is_missing=True)
            logger.debug(f"Removed task {name!r} on {self.client.base_url}")

    def _mark(self, names: list, done: bool):
        self._check_batch(names)
        self._require_all(names)

        mark = self.client.done if done else self.client.undone
        for name in names:
            # The position is looked up again right before the mutating call.
            index = self._resolve(name)
            self._call(name, mark, index, not_found_is_missing=True)

    def done(self, names: list):
        self._mark(names, True)

    def undone(self, names: list):
        self._mark(names, False)

    def clear(self, done_only: bool = False):
        self._call("", self.client.clear_done if done_only else self.client.clear)

    def list_tasks(self) -> list:
        _, tasks = self._call("", self.client.get)
        return tasks


def open_backend(store: TaskStore, connection: ConnectionConfig) -> Backend:
    """
    Pick the backend for this process.

    A saved connection selects the remote backend. An unreadable connection file
    is logged and treated as absent. Otherwise the local store is loaded.

    Raises:
        DataError: if the local task file cannot be read
    """
    try:
        cloud = connection.load()
    except ConfigError as e:
        logger.warning(f"Failed to read cloud config: {e}. Proceeding with local mode.")
        cloud = None

    if cloud is not None:
        logger.debug(f"Using remote backend {cloud.host}:{cloud.port}")
        return RemoteBackend(RemoteClient(cloud.host, cloud.port))

    try:
        store.load()
    except StoreError as e:
        raise DataError('tasks', e, action='load') from e
    logger.debug(f"Using local backend {store.path}")
    return LocalBackend(store)
