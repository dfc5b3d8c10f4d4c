"""
Command dispatch.

Turns a Request into calls on whichever backend the process started with, and
follows every successful change with a fresh listing from that same backend.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from todolist.backends import Backend
from todolist.config import ConfigError, ConnectionConfig
from todolist.errors import CommandError, DataError, UnlinkedError

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    DONE = "done"
    UNDONE = "undone"
    CLEAR = "clear"
    CLEAR_DONE = "clear-done"  # deprecated alias of clear --done
    LIST = "list"
    CONNECT = "connect"
    DISCONNECT = "disconnect"


@dataclass
class Request:
    operation: Operation
    names: list[str] = field(default_factory=list)
    done_only: bool = False
    host: Optional[str] = None
    port: Optional[str] = None


@dataclass
class DispatchResult:
    """
    What a successful request produced.

    ``tasks`` is the listing to render (None for connect/disconnect).
    ``listing_error`` is set when the follow-up listing failed after the
    request itself had already gone through.
    """

    operation: Operation
    tasks: Optional[list] = None
    listing_error: Optional[CommandError] = None
    message: Optional[str] = None


class Dispatcher:
    def __init__(self, backend: Backend, connection: ConnectionConfig):
        self.backend = backend
        self.connection = connection

    def execute(self, request: Request) -> DispatchResult:
        """
        Run one request.

        Raises:
            CommandError: if the request itself failed
        """
        op = Operation(request.operation)
        logger.debug(f"Dispatching {op.value} on {self.backend.mode} backend")

        if op == Operation.CONNECT:
            return self._connect(request.host, request.port)
        if op == Operation.DISCONNECT:
            return self._disconnect()
        if op == Operation.LIST:
            return DispatchResult(operation=op, tasks=self.backend.list_tasks())

        if op == Operation.ADD:
            self.backend.add(request.names)
        elif op == Operation.REMOVE:
            self.backend.remove(request.names)
        elif op == Operation.DONE:
            self.backend.done(request.names)
        elif op == Operation.UNDONE:
            self.backend.undone(request.names)
        elif op == Operation.CLEAR:
            self.backend.clear(done_only=request.done_only)
        elif op == Operation.CLEAR_DONE:
            logger.warning("clear-done is deprecated. Use clear --done instead.")
            self.backend.clear(done_only=True)

        result = DispatchResult(operation=op)
        try:
            result.tasks = self.backend.list_tasks()
        except CommandError as e:
            logger.debug(f"Follow-up listing failed: {e}")
            result.listing_error = e
        return result

    # ========================================================================
    # Administrative requests
    # ========================================================================

    def _connect(self, host: Optional[str], port: Optional[str]) -> DispatchResult:
        try:
            self.connection.save(host, port)
        except ConfigError as e:
            raise DataError('server configuration', e) from e
        return DispatchResult(operation=Operation.CONNECT, message="Successfully linked server.")

    def _disconnect(self) -> DispatchResult:
        try:
            self.connection.remove()
        except FileNotFoundError as e:
            raise UnlinkedError() from e
        except OSError as e:
            raise DataError('configuration', e) from e
        return DispatchResult(operation=Operation.DISCONNECT, message="Successfully unlinked server.")
