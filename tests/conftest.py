"""
Pytest configuration and shared fixtures for todolist tests.
"""

import asyncio
import json
import threading
from types import SimpleNamespace

import pytest

from todolist.backends import LocalBackend, RemoteBackend
from todolist.client import RemoteClient
from todolist.config import ConnectionConfig
from todolist.server import start_server
from todolist.store import TaskStore


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Keep every test away from the real per-user data and config dirs."""
    data = tmp_path / 'data'
    config = tmp_path / 'config'
    monkeypatch.setenv('TODO_DATA_DIR', str(data))
    monkeypatch.setenv('TODO_CONFIG_DIR', str(config))
    return SimpleNamespace(data=data, config=config)


@pytest.fixture
def store(isolated_dirs):
    """Empty, loaded task store."""
    store = TaskStore(isolated_dirs.data / 'todos.json')
    store.load()
    return store


@pytest.fixture
def sample_tasks(isolated_dirs):
    """Write a small task file: two open tasks and one done."""
    tasks = [
        {'name': 'buy milk', 'done': False},
        {'name': 'walk dog', 'done': True},
        {'name': 'call mom', 'done': False},
    ]
    isolated_dirs.data.mkdir(parents=True, exist_ok=True)
    (isolated_dirs.data / 'todos.json').write_text(json.dumps(tasks))
    return tasks


@pytest.fixture
def store_with_tasks(isolated_dirs, sample_tasks):
    store = TaskStore(isolated_dirs.data / 'todos.json')
    store.load()
    return store


@pytest.fixture
def local_backend(store):
    return LocalBackend(store)


@pytest.fixture
def connection(isolated_dirs):
    return ConnectionConfig(isolated_dirs.config)


@pytest.fixture
def live_server(tmp_path):
    """
    Run a real todo server on a free port in a background thread.

    Yields a namespace with ``client`` (a RemoteClient bound to it), ``port``
    and ``store`` (the server's own task store).
    """
    store = TaskStore(tmp_path / 'server' / 'todos.json')
    loop = asyncio.new_event_loop()
    started = threading.Event()
    holder = {}

    def run():
        asyncio.set_event_loop(loop)
        listener = loop.run_until_complete(start_server(store, '127.0.0.1', 0))
        holder['port'] = listener.sockets[0].getsockname()[1]
        started.set()
        loop.run_forever()
        listener.close()
        loop.run_until_complete(listener.wait_closed())
        loop.close()

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    assert started.wait(timeout=5), "todo server did not start"

    port = str(holder['port'])
    yield SimpleNamespace(client=RemoteClient('127.0.0.1', port), port=port, store=store)

    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=5)


@pytest.fixture
def remote_backend(live_server):
    return RemoteBackend(live_server.client)
