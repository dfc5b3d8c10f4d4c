"""
Tests for task storage and name lookup.
"""

import json
import os
import time

import pytest

from todolist.store import StoreError, Task, TaskStore, find_index


class TestFindIndex:
    """Name to position lookup."""

    def test_finds_position(self):
        tasks = [Task('a', False), Task('b', True)]
        assert find_index(tasks, 'b') == 1

    def test_empty_list(self):
        assert find_index([], 'a') is None

    def test_first_match_wins(self):
        tasks = [Task('a', False), Task('a', True)]
        assert find_index(tasks, 'a') == 0

    def test_case_sensitive(self):
        tasks = [Task('Buy milk', False)]
        assert find_index(tasks, 'buy milk') is None

    def test_no_partial_match(self):
        tasks = [Task('buy milk', False)]
        assert find_index(tasks, 'buy') is None


class TestTaskStore:
    """Loading and saving the task file."""

    def test_missing_file_is_empty(self, tmp_path):
        store = TaskStore(tmp_path / 'nope' / 'todos.json')
        store.load()
        assert store.tasks == []

    def test_load_sample(self, store_with_tasks):
        assert [t.name for t in store_with_tasks.tasks] == ['buy milk', 'walk dog', 'call mom']
        assert store_with_tasks.tasks[1].done is True

    def test_save_creates_directory(self, tmp_path):
        path = tmp_path / 'deep' / 'dir' / 'todos.json'
        store = TaskStore(path)
        store.append(Task('x'))
        store.save()

        assert json.loads(path.read_text()) == [{'name': 'x', 'done': False}]
        assert not path.with_suffix('.tmp').exists()

    def test_save_then_load_keeps_order(self, tmp_path):
        path = tmp_path / 'todos.json'
        store = TaskStore(path)
        for name in ['c', 'a', 'b']:
            store.append(Task(name))
        store.set_done_at(1, True)
        store.save()

        reloaded = TaskStore(path)
        reloaded.load()
        assert [(t.name, t.done) for t in reloaded.tasks] == [('c', False), ('a', True), ('b', False)]

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / 'todos.json'
        path.write_text('{not json')
        with pytest.raises(StoreError):
            TaskStore(path).load()

    def test_non_list_file_raises(self, tmp_path):
        path = tmp_path / 'todos.json'
        path.write_text('{"name": "x"}')
        with pytest.raises(StoreError):
            TaskStore(path).load()

    def test_recovers_orphaned_tmp(self, tmp_path):
        path = tmp_path / 'todos.json'
        path.with_suffix('.tmp').write_text(json.dumps([{'name': 'saved', 'done': True}]))

        store = TaskStore(path)
        store.load()

        assert [t.name for t in store.tasks] == ['saved']
        assert path.exists()
        assert not path.with_suffix('.tmp').exists()

    def test_discards_stale_tmp(self, tmp_path):
        path = tmp_path / 'todos.json'
        tmp = path.with_suffix('.tmp')
        tmp.write_text(json.dumps([{'name': 'old', 'done': False}]))
        path.write_text(json.dumps([{'name': 'new', 'done': False}]))
        past = time.time() - 60
        os.utime(tmp, (past, past))

        store = TaskStore(path)
        store.load()

        assert [t.name for t in store.tasks] == ['new']
        assert not tmp.exists()


class TestMutationPrimitives:
    def test_remove_at(self, store_with_tasks):
        removed = store_with_tasks.remove_at(0)
        assert removed.name == 'buy milk'
        assert len(store_with_tasks.tasks) == 2

    def test_set_done_returns_previous(self, store_with_tasks):
        assert store_with_tasks.set_done_at(1, True) is True
        assert store_with_tasks.set_done_at(0, True) is False
        assert store_with_tasks.tasks[0].done is True

    def test_retain_not_done(self, store_with_tasks):
        assert store_with_tasks.retain_not_done() == 1
        assert [t.name for t in store_with_tasks.tasks] == ['buy milk', 'call mom']

    def test_clear_all(self, store_with_tasks):
        assert store_with_tasks.clear_all() == 3
        assert store_with_tasks.tasks == []

    def test_get_tasks_is_live(self, store_with_tasks):
        store_with_tasks.append(Task('new'))
        assert store_with_tasks.get_tasks()[-1].name == 'new'
