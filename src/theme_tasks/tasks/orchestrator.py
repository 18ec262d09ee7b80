"""Sequential task execution with stop-on-first-failure."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from theme_tasks.actions.executor import RunContext
from theme_tasks.cancellation import CancellationToken
from theme_tasks.errors import ActionError, TaskFailedError
from theme_tasks.tasks.models import Action
from theme_tasks.tasks.registry import TaskTable

logger = logging.getLogger(__name__)


class StepExecutor(Protocol):
    """Protocol implemented by action executors."""

    def execute(self, action: Action, context: RunContext) -> None:
        """Perform one primitive action or raise ActionError."""


@dataclass(slots=True)
class RunSummary:
    """What one orchestrator run did."""

    targets: tuple[str, ...]
    completed: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0


class Orchestrator:
    """Resolves task names into steps and runs them one after another."""

    def __init__(self, table: TaskTable, executor: StepExecutor) -> None:
        self.table = table
        self.executor = executor

    def run(self, name: str, *, token: CancellationToken | None = None) -> RunSummary:
        return self.run_many((name,), token=token)

    def run_many(
        self,
        names: Sequence[str],
        *,
        token: CancellationToken | None = None,
    ) -> RunSummary:
        """Run tasks in order; the first failing step ends the run.

        All names are resolved before anything runs, so configuration errors
        never leave partial side effects. Completed steps are not rolled back.
        """

        targets = tuple(names)
        steps = self.table.plan(targets)
        context = RunContext(
            run_tasks=self.run_many,
            token=token or CancellationToken(),
        )
        summary = RunSummary(targets=targets)
        started = time.monotonic()
        for step in steps:
            if context.token.cancelled:
                logger.info("Run cancelled before %s", step.task_name)
                break
            logger.info("Running %s (%s)", step.task_name, step.action.kind)
            try:
                self.executor.execute(step.action, context)
            except ActionError as error:
                logger.error("Task %s failed: %s", step.task_name, error)
                raise TaskFailedError(step.task_name, error) from error
            summary.completed.append(step.task_name)
        summary.duration_seconds = time.monotonic() - started
        return summary
