"""Controllers for theme task CLI commands."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from theme_tasks.actions import ActionExecutor
from theme_tasks.config import Settings
from theme_tasks.pipeline import DEFAULT_TARGET, build_task_table
from theme_tasks.process import ExternalProcess, SubprocessRunner
from theme_tasks.server import DevServer, LiveReloadServer
from theme_tasks.tasks.models import ServeDirectory
from theme_tasks.tasks.orchestrator import Orchestrator


@dataclass(slots=True)
class RunTargetsCommand:
    """CLI input for running build targets."""

    theme_dir: Path | None
    targets: tuple[str, ...]


@dataclass(slots=True)
class ListTasksCommand:
    """CLI input for task listing."""

    theme_dir: Path | None


class ThemeTasksCliController:
    """Builds the task table from settings and runs or describes it."""

    def __init__(
        self,
        *,
        process_factory: Callable[[], ExternalProcess] = SubprocessRunner,
        server_factory: Callable[[ServeDirectory], DevServer] = LiveReloadServer.for_action,
    ) -> None:
        self.process_factory = process_factory
        self.server_factory = server_factory

    def run_targets(self, command: RunTargetsCommand) -> list[str]:
        settings = _settings(command.theme_dir)
        orchestrator = Orchestrator(
            build_task_table(settings),
            ActionExecutor(
                process=self.process_factory(),
                working_dir=settings.paths.theme_dir,
                server_factory=self.server_factory,
            ),
        )
        targets = command.targets or (DEFAULT_TARGET,)
        summary = orchestrator.run_many(targets)
        return [
            f"Done: {', '.join(summary.targets)} "
            f"({len(summary.completed)} step(s) in {summary.duration_seconds:.1f}s)",
        ]

    def list_tasks(self, command: ListTasksCommand) -> list[str]:
        settings = _settings(command.theme_dir)
        table = build_task_table(settings)
        width = max(len(name) for name, _ in table)
        lines = [f"Theme directory: {settings.paths.theme_dir}"]
        for name, definition in table:
            detail = " -> ".join(definition.steps) if definition.is_composite else definition.kind
            line = f"{name.ljust(width)}  {detail}"
            if definition.description:
                line += f"  # {definition.description}"
            lines.append(line)
        return lines


def _settings(theme_dir: Path | None) -> Settings:
    settings = Settings.from_env(theme_dir=theme_dir)
    settings.validate()
    return settings
