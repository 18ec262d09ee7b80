"""Task registration and plan resolution."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from theme_tasks.errors import (
    DuplicateTaskError,
    TaskConfigurationError,
    TaskCycleError,
    UnknownTaskError,
)
from theme_tasks.tasks.models import (
    OpenBrowser,
    PlannedStep,
    ServeDirectory,
    TaskDefinition,
    WatchFiles,
)


class TaskRegistry:
    """Mutable builder for a task table; freeze it before running anything."""

    def __init__(self) -> None:
        self._tasks: dict[str, TaskDefinition] = {}

    def register(self, name: str, definition: TaskDefinition) -> None:
        if not name or not name.strip():
            raise TaskConfigurationError("Task name must not be empty.")
        if name in self._tasks:
            raise DuplicateTaskError(name)
        self._tasks[name] = definition

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def freeze(self) -> TaskTable:
        """Validate references and return an immutable table."""

        table = TaskTable(tasks=MappingProxyType(dict(self._tasks)))
        table.validate()
        return table


@dataclass(frozen=True, slots=True)
class TaskTable:
    """Read-only task definitions keyed by name, in registration order."""

    tasks: Mapping[str, TaskDefinition]

    def __iter__(self) -> Iterator[tuple[str, TaskDefinition]]:
        return iter(self.tasks.items())

    def __contains__(self, name: object) -> bool:
        return name in self.tasks

    def get(self, name: str) -> TaskDefinition:
        try:
            return self.tasks[name]
        except KeyError:
            raise UnknownTaskError(name) from None

    def resolve(self, name: str) -> list[PlannedStep]:
        """Expand a task depth-first into its primitive steps, in declared order."""

        steps: list[PlannedStep] = []
        self._expand(name, path=(), referenced_by=None, out=steps)
        return steps

    def plan(self, names: Iterable[str]) -> list[PlannedStep]:
        """Resolve several tasks into one sequence and check server ordering."""

        steps: list[PlannedStep] = []
        for name in names:
            steps.extend(self.resolve(name))
        _check_server_ordering(steps)
        return steps

    def validate(self) -> None:
        for name, definition in self.tasks.items():
            for step in definition.steps:
                if step not in self.tasks:
                    raise UnknownTaskError(step, referenced_by=name)
        for name in self.tasks:
            self.resolve(name)
        for name, definition in self.tasks.items():
            if isinstance(definition.action, WatchFiles):
                self._validate_watch_rules(name, definition.action)

    def _validate_watch_rules(self, name: str, action: WatchFiles) -> None:
        for rule in action.rules:
            if not rule.patterns:
                raise TaskConfigurationError(
                    f"Watch rule {rule.name!r} of {name!r} has no patterns.",
                )
            for task_name in rule.tasks:
                if task_name not in self.tasks:
                    raise UnknownTaskError(task_name, referenced_by=name)
                for step in self.resolve(task_name):
                    if isinstance(step.action, (WatchFiles, ServeDirectory, OpenBrowser)):
                        raise TaskConfigurationError(
                            f"Watch rule {rule.name!r} of {name!r} cannot re-run "
                            f"{step.task_name!r} ({step.action.kind}).",
                        )

    def _expand(
        self,
        name: str,
        *,
        path: tuple[str, ...],
        referenced_by: str | None,
        out: list[PlannedStep],
    ) -> None:
        if name in path:
            raise TaskCycleError((*path, name))
        definition = self.tasks.get(name)
        if definition is None:
            raise UnknownTaskError(name, referenced_by=referenced_by)
        if definition.action is not None:
            out.append(PlannedStep(task_name=name, action=definition.action))
            return
        for step in definition.steps:
            self._expand(step, path=(*path, name), referenced_by=name, out=out)


def _check_server_ordering(steps: list[PlannedStep]) -> None:
    server_started = False
    for step in steps:
        if isinstance(step.action, ServeDirectory):
            server_started = True
        elif isinstance(step.action, (OpenBrowser, WatchFiles)) and not server_started:
            raise TaskConfigurationError(
                f"Task {step.task_name!r} ({step.action.kind}) needs a preview server "
                "started earlier in the same run.",
            )
