#!/usr/bin/env python3
"""
Todo Server

A small HTTP server holding one task list, for `todo connect` clients.

Tasks are loaded once at startup, kept in memory, and written back to the data
file after every change. Positions in the list are the identifiers the
index-based endpoints take.

Usage:
    todo-server                          # Listen on 0.0.0.0:6982
    todo-server --port 7000              # Custom port
    todo-server --data ./todos.json      # Custom task file
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

from todolist.config import DATA_FILE, DEFAULT_PORT, data_dir
from todolist.store import StoreError, Task, TaskStore, find_index

logger = logging.getLogger(__name__)


# ============================================================================
# Server State
# ============================================================================

class TodoServer:
    """Task list operations behind the HTTP routes."""

    def __init__(self, store: TaskStore):
        self.store = store
        self._lock = asyncio.Lock()

    async def load(self):
        async with self._lock:
            # Run file I/O in thread pool to avoid blocking event loop
            await asyncio.to_thread(self.store.load)
        logger.info(f"Loaded {len(self.store.tasks)} tasks from {self.store.path}")

    def _snapshot(self) -> list[Task]:
        return [Task(name=t.name, done=t.done) for t in self.store.tasks]

    async def _save(self, snapshot: list[Task]):
        """Write the list out; on failure put back ``snapshot`` so memory matches disk."""
        try:
            await asyncio.to_thread(self.store.save)
        except StoreError:
            self.store.tasks = snapshot
            logger.error(f"Save failed, rolled back to {len(snapshot)} tasks")
            raise

    def _valid_index(self, index: int) -> bool:
        return 0 <= index < len(self.store.tasks)

    async def get_tasks(self) -> list[dict]:
        async with self._lock:
            return [t.to_dict() for t in self.store.tasks]

    async def add_task(self, name: str) -> Task:
        async with self._lock:
            snapshot = self._snapshot()
            task = Task(name=name, done=False)
            self.store.append(task)
            await self._save(snapshot)
        logger.info(f"Adding task {name}")
        return task

    async def get_index(self, name: str) -> Optional[int]:
        async with self._lock:
            return find_index(self.store.tasks, name)

    async def remove_task(self, index: int) -> Optional[Task]:
        async with self._lock:
            if not self._valid_index(index):
                return None
            snapshot = self._snapshot()
            task = self.store.remove_at(index)
            await self._save(snapshot)
        logger.info(f"Removing task with index {index}: {task.name}")
        return task

    async def mark_task(self, index: int, done: bool) -> Optional[Task]:
        async with self._lock:
            if not self._valid_index(index):
                return None
            snapshot = self._snapshot()
            self.store.set_done_at(index, done)
            task = self.store.tasks[index]
            await self._save(snapshot)
        logger.info(f"Marking task with index {index} as {'done' if done else 'undone'}: {task.name}")
        return Task(name=task.name, done=task.done)

    async def clear(self, done_only: bool = False) -> int:
        async with self._lock:
            snapshot = self._snapshot()
            removed = self.store.retain_not_done() if done_only else self.store.clear_all()
            await self._save(snapshot)
        logger.info(f"Clearing {'done ' if done_only else ''}tasks ({removed} removed)")
        return removed


# ============================================================================
# HTTP Server
# ============================================================================

MAX_CONTENT_LENGTH = 1_000_000  # 1MB limit to prevent memory exhaustion

HTTP_STATUS_TEXT = {
    200: "OK",
    400: "Bad Request",
    404: "Not Found",
    413: "Payload Too Large",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
}


def _response(status_code: int, payload: Any) -> bytes:
    body = json.dumps(payload).encode('utf-8')
    head = (
        f"HTTP/1.1 {status_code} {HTTP_STATUS_TEXT.get(status_code, 'Error')}\r\n"
        f"Content-Type: application/json\r\n"
        f"Content-Length: {len(body)}\r\n"
        f"Connection: close\r\n"
        f"\r\n"
    )
    return head.encode('ascii') + body


def _error(status_code: int, message: str = "") -> bytes:
    return _response(status_code, {'error': message or HTTP_STATUS_TEXT.get(status_code, "Error")})


def _is_index(data: Any) -> bool:
    return isinstance(data, int) and not isinstance(data, bool)


async def handle_request(server: TodoServer, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
    try:
        request_line = await reader.readline()
        if not request_line:
            return

        parts = request_line.decode('latin-1').strip().split(' ', 2)
        if len(parts) < 2:
            writer.write(_error(400, "Malformed request line"))
            await writer.drain()
            return
        method, path = parts[0].upper(), parts[1]

        headers = {}
        while True:
            line = await reader.readline()
            if line in (b'\r\n', b'\n') or not line:
                break
            if b':' in line:
                key, value = line.decode('latin-1').split(':', 1)
                headers[key.strip().lower()] = value.strip()

        body = b''
        if 'content-length' in headers:
            try:
                length = int(headers['content-length'])
            except ValueError:
                writer.write(_error(400, "Invalid Content-Length header"))
                await writer.drain()
                return
            if length < 0 or length > MAX_CONTENT_LENGTH:
                writer.write(_error(413, f"Content-Length exceeds {MAX_CONTENT_LENGTH} bytes"))
                await writer.drain()
                return
            body = await reader.readexactly(length)

        data = None
        if body:
            try:
                data = json.loads(body.decode('utf-8'))
            except (UnicodeDecodeError, json.JSONDecodeError):
                writer.write(_error(400, "Invalid JSON body"))
                await writer.drain()
                return

        response_data, status_code = await route_request(server, method, path, data)
        writer.write(_response(status_code, response_data))
        await writer.drain()

    except Exception as e:
        logger.error(f"Request error: {e}")
        writer.write(_error(500, str(e)))
        await writer.drain()
    finally:
        writer.close()
        await writer.wait_closed()


async def route_request(server: TodoServer, method: str, path: str, data: Any) -> tuple[Any, int]:
    """Route request to appropriate handler. Returns (response_data, status_code)."""
    path = path.split('?', 1)[0]

    if method == 'GET' and path == '/tasks':
        return await server.get_tasks(), 200

    if method == 'POST' and path == '/add':
        if not isinstance(data, str) or not data:
            return {'error': 'Body must be a non-empty task name'}, 422
        task = await server.add_task(data)
        return task.to_dict(), 200

    if method == 'GET' and path == '/index':
        if not isinstance(data, str):
            return {'error': 'Body must be a task name'}, 422
        index = await server.get_index(data)
        if index is None:
            return {'error': 'Task not found'}, 404
        return index, 200

    if method == 'DELETE' and path == '/remove':
        if not _is_index(data):
            return {'error': 'Body must be a task index'}, 422
        task = await server.remove_task(data)
        if task is None:
            return {'error': 'Could not find specified index'}, 404
        return {'success': True}, 200

    if method == 'POST' and path in ('/done', '/undone'):
        if not _is_index(data):
            return {'error': 'Body must be a task index'}, 422
        task = await server.mark_task(data, done=(path == '/done'))
        if task is None:
            return {'error': 'Could not find specified index'}, 404
        return task.to_dict(), 200

    if method == 'DELETE' and path == '/clear':
        removed = await server.clear()
        return {'success': True, 'removed': removed}, 200

    if method == 'DELETE' and path == '/cleardone':
        removed = await server.clear(done_only=True)
        return {'success': True, 'removed': removed}, 200

    return {'error': f'Unknown route: {method} {path}'}, 404


async def start_server(store: TaskStore, host: str = '0.0.0.0', port: int = int(DEFAULT_PORT)) -> asyncio.AbstractServer:
    """Load the task file and start listening. Pass port 0 to pick a free port."""
    server = TodoServer(store)
    await server.load()
    return await asyncio.start_server(
        lambda r, w: handle_request(server, r, w),
        host,
        port,
    )


async def serve(store: TaskStore, host: str, port: int):
    listener = await start_server(store, host, port)
    addr = listener.sockets[0].getsockname()
    logger.info(f"Todo server running on http://{addr[0]}:{addr[1]}")

    async with listener:
        await listener.serve_forever()


def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(prog='todo-server', description='Todo Server')
    parser.add_argument('--host', default='0.0.0.0')
    parser.add_argument('--port', type=int, default=int(DEFAULT_PORT))
    parser.add_argument('--data', type=Path, default=None, help='Task file (default: platform data dir)')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )

    store = TaskStore(args.data or data_dir() / DATA_FILE)
    try:
        asyncio.run(serve(store, args.host, args.port))
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == '__main__':
    main()
