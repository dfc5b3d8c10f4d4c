"""
todolist - a personal task list, kept in a local file or on a todo server.

The same commands run against either backend with the same validation rules
and the same error messages.
"""

__version__ = "0.1.0"

from todolist.backends import Backend, LocalBackend, RemoteBackend, open_backend
from todolist.dispatcher import Dispatcher, Operation, Request

__all__ = [
    "Backend",
    "Dispatcher",
    "LocalBackend",
    "Operation",
    "RemoteBackend",
    "Request",
    "open_backend",
    "__version__",
]
