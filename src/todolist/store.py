"""
Task storage.

Tasks live in a single JSON file holding an ordered list of
``{"name": ..., "done": ...}`` objects. Position in that list is the only index
the rest of the system uses, so every mutation primitive is position based.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the task file cannot be read or written."""


# ============================================================================
# Data Model
# ============================================================================

@dataclass
class Task:
    name: str
    done: bool = False

    def to_dict(self) -> dict:
        return {'name': self.name, 'done': self.done}

    @classmethod
    def from_dict(cls, data: dict) -> 'Task':
        return cls(name=str(data['name']), done=bool(data.get('done', False)))


def find_index(tasks: list, name: str) -> Optional[int]:
    """
    Find the position of a task by exact name.

    Matching is case-sensitive. If several tasks share the name the first one
    wins; uniqueness is only enforced when tasks are added.

    Returns:
        The position of the first match, or None if no task has that name
    """
    for index, task in enumerate(tasks):
        if task.name == name:
            return index
    return None


# ============================================================================
# File Store
# ============================================================================

class TaskStore:
    """
    Ordered task list backed by a JSON file.

    A missing file is an empty list. Saves go through a ``.tmp`` sibling that is
    renamed over the real file, and a leftover ``.tmp`` from an interrupted save
    is recovered on the next load.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.tasks: list[Task] = []

    def _recover_tmp_file(self) -> bool:
        """Check for and recover from orphaned .tmp file. Returns True if recovery occurred."""
        tmp_file = self.path.with_suffix('.tmp')

        if not tmp_file.exists():
            return False

        if not self.path.exists():
            logger.warning(f"Recovering from orphaned tmp file: {tmp_file}")
            tmp_file.rename(self.path)
            return True

        if tmp_file.stat().st_mtime > self.path.stat().st_mtime:
            try:
                json.loads(tmp_file.read_text(encoding='utf-8'))
                logger.warning(f"Recovering from newer tmp file: {tmp_file}")
                tmp_file.rename(self.path)
                return True
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Corrupt tmp file, removing: {e}")
                tmp_file.unlink()
                return False

        logger.info(f"Removing stale tmp file: {tmp_file}")
        tmp_file.unlink()
        return False

    def load(self):
        """Load tasks from disk, replacing whatever is in memory."""
        try:
            self._recover_tmp_file()
            if not self.path.exists():
                self.tasks = []
                return
            data = json.loads(self.path.read_text(encoding='utf-8'))
            if not isinstance(data, list):
                raise StoreError(f"{self.path} does not contain a task list")
            self.tasks = [Task.from_dict(item) for item in data]
        except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
            raise StoreError(f"could not read {self.path}: {e}") from e
        logger.debug(f"Loaded {len(self.tasks)} tasks from {self.path}")

    def save(self):
        """Write tasks to disk atomically."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_file = self.path.with_suffix('.tmp')
            tmp_file.write_text(
                json.dumps([t.to_dict() for t in self.tasks], indent=2),
                encoding='utf-8',
            )
            tmp_file.replace(self.path)
        except OSError as e:
            raise StoreError(f"could not write {self.path}: {e}") from e
        logger.debug(f"Saved {len(self.tasks)} tasks to {self.path}")

    def get_tasks(self) -> list[Task]:
        """The live, ordered task list."""
        return self.tasks

    # ========================================================================
    # Mutation primitives
    # ========================================================================

    def append(self, task: Task):
        self.tasks.append(task)

    def remove_at(self, index: int) -> Task:
        return self.tasks.pop(index)

    def set_done_at(self, index: int, done: bool) -> bool:
        """Set the done flag. Returns the previous value."""
        was_done = self.tasks[index].done
        self.tasks[index].done = done
        return was_done

    def retain_not_done(self) -> int:
        """Drop completed tasks. Returns how many were removed."""
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks if not t.done]
        return before - len(self.tasks)

    def clear_all(self) -> int:
        count = len(self.tasks)
        self.tasks = []
        return count
