"""
In-memory stand-in for RemoteClient.

Behaves like a todo server holding ``tasks``, records every call, and can be
told to fail the Nth call of a given method.
"""

from todolist.client import ApiHTTPError, ApiRequestError
from todolist.store import Task, find_index


class FakeClient:
    base_url = 'http://fake-server:6982'

    def __init__(self, tasks=None):
        self.tasks = [Task(name, done) for name, done in (tasks or [])]
        self.calls = []
        self._failures = {}

    def fail(self, method: str, error: Exception, on_call: int = 1):
        """Raise ``error`` on the ``on_call``-th call of ``method``."""
        self._failures[(method, on_call)] = error

    def calls_to(self, method: str) -> list:
        return [arg for m, arg in self.calls if m == method]

    def _record(self, method: str, arg=None):
        self.calls.append((method, arg))
        count = len(self.calls_to(method))
        error = self._failures.get((method, count))
        if error is not None:
            raise error

    def _check_index(self, index: int):
        if not 0 <= index < len(self.tasks):
            raise ApiHTTPError(404)

    def get(self):
        self._record('get')
        return 200, [Task(t.name, t.done) for t in self.tasks]

    def add(self, name):
        self._record('add', name)
        task = Task(name, False)
        self.tasks.append(task)
        return 200, Task(name, False)

    def get_index(self, name):
        self._record('get_index', name)
        index = find_index(self.tasks, name)
        if index is None:
            raise ApiHTTPError(404)
        return 200, index

    def remove(self, index):
        self._record('remove', index)
        self._check_index(index)
        self.tasks.pop(index)
        return 200, {'success': True}

    def done(self, index):
        self._record('done', index)
        self._check_index(index)
        self.tasks[index].done = True
        return 200, Task(self.tasks[index].name, True)

    def undone(self, index):
        self._record('undone', index)
        self._check_index(index)
        self.tasks[index].done = False
        return 200, Task(self.tasks[index].name, False)

    def clear(self):
        self._record('clear')
        self.tasks = []
        return 200, {'success': True}

    def clear_done(self):
        self._record('clear_done')
        self.tasks = [t for t in self.tasks if not t.done]
        return 200, {'success': True}


def connection_refused() -> ApiRequestError:
    return ApiRequestError(ConnectionRefusedError(111, 'Connection refused'))
