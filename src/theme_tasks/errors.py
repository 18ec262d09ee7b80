"""Error taxonomy for task configuration and execution."""

from __future__ import annotations


class TaskConfigurationError(ValueError):
    """Task table is malformed or a requested task cannot be planned.

    Always raised before any action runs.
    """


class UnknownTaskError(TaskConfigurationError):
    """Requested or referenced task name is not registered."""

    def __init__(self, name: str, *, referenced_by: str | None = None) -> None:
        if referenced_by is None:
            message = f"Task {name!r} is not registered."
        else:
            message = f"Task {referenced_by!r} references unregistered task {name!r}."
        super().__init__(message)
        self.name = name
        self.referenced_by = referenced_by


class DuplicateTaskError(TaskConfigurationError):
    """Task name registered twice."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Task {name!r} is already registered.")
        self.name = name


class TaskCycleError(TaskConfigurationError):
    """Composite tasks reference each other in a loop."""

    def __init__(self, path: tuple[str, ...]) -> None:
        super().__init__("Task reference cycle: " + " -> ".join(path))
        self.path = path


class ActionError(RuntimeError):
    """Primitive action failure with retryability hint."""

    def __init__(self, message: str, *, transient: bool = False) -> None:
        super().__init__(message)
        self.transient = transient


class TaskFailedError(RuntimeError):
    """A step of the running sequence failed; later steps were skipped."""

    def __init__(self, task_name: str, cause: ActionError) -> None:
        super().__init__(f"Task {task_name!r} failed: {cause}")
        self.task_name = task_name
        self.cause = cause
