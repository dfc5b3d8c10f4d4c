"""
Command errors.

Every failure a command can hit, local or remote, ends up as one of the classes
below. Each carries what it needs to print its own message.
"""


class CommandError(Exception):
    """Base class for all command failures."""

    def __str__(self) -> str:
        return self.render()

    def render(self) -> str:
        raise NotImplementedError


class NoTasksSpecifiedError(CommandError):
    def render(self) -> str:
        return "No tasks specified!"


class DuplicateInputError(CommandError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def render(self) -> str:
        return f"Task {self.name} was specified multiple times!"


class EmptyTaskNameError(CommandError):
    def render(self) -> str:
        return "Task names cannot be empty!"


class TaskExistsError(CommandError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def render(self) -> str:
        return f"Task {self.name} already exists!"


class TaskNotFoundError(CommandError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def render(self) -> str:
        return f"Task {self.name} not found!"


class HTTPStatusError(CommandError):
    """The server answered with a status the command did not expect."""

    def __init__(self, name: str, status: int):
        super().__init__(name, status)
        self.name = name
        self.status = status

    def render(self) -> str:
        if not self.name:
            return f"HTTP error code {self.status}!"
        return f"HTTP error code {self.status} for task {self.name}!"


class ServerConnectionError(CommandError):
    """The server could not be reached, or its reply could not be read."""

    def __init__(self, name: str = ""):
        super().__init__(name)
        self.name = name

    def render(self) -> str:
        if not self.name:
            return "Failed to connect to the server!"
        return f"Failed to connect to the server for task {self.name}!"


class DataError(CommandError):
    """Local persistence (task file or connection config) failed."""

    def __init__(self, what: str, cause, action: str = 'save'):
        super().__init__(what, cause)
        self.what = what
        self.cause = cause
        self.action = action

    def render(self) -> str:
        return f"Unable to {self.action} {self.what}: {self.cause}!"


class UnlinkedError(CommandError):
    def render(self) -> str:
        return "You're already unlinked!"


def render_error(err: CommandError) -> str:
    """Human-readable message for a command error."""
    return err.render()
