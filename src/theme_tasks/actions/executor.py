"""Dispatch primitive actions to their implementations."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from theme_tasks.actions.files import copy_assets, remove_paths
from theme_tasks.actions.styles import compile_styles
from theme_tasks.cancellation import CancellationToken, cancel_on_signals
from theme_tasks.errors import ActionError
from theme_tasks.process import ExternalProcess, ProcessRequest, split_command
from theme_tasks.server import DevServer, LiveReloadServer
from theme_tasks.tasks.models import (
    Action,
    CompileStyles,
    CopyAssets,
    ExternalCommand,
    OpenBrowser,
    RemovePaths,
    ServeDirectory,
    WatchFiles,
)
from theme_tasks.watch import WatchSession

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RunContext:
    """State shared by the steps of one orchestrator run."""

    run_tasks: Callable[[Sequence[str]], object]
    token: CancellationToken
    server: DevServer | None = None


class ActionExecutor:
    """Executes primitive actions against the filesystem, processes and network."""

    def __init__(
        self,
        *,
        process: ExternalProcess,
        working_dir: Path,
        server_factory: Callable[[ServeDirectory], DevServer] = LiveReloadServer.for_action,
    ) -> None:
        self.process = process
        self.working_dir = working_dir
        self.server_factory = server_factory
        self._handlers: dict[type, Callable[[Any, RunContext], None]] = {
            CopyAssets: self._copy,
            CompileStyles: self._compile,
            RemovePaths: self._remove,
            ExternalCommand: self._command,
            ServeDirectory: self._serve,
            OpenBrowser: self._open,
            WatchFiles: self._watch,
        }

    def execute(self, action: Action, context: RunContext) -> None:
        handler = self._handlers.get(type(action))
        if handler is None:
            raise ActionError(f"Unsupported action type: {type(action).__name__}")
        handler(action, context)

    def _copy(self, action: CopyAssets, _: RunContext) -> None:
        copy_assets(action)

    def _compile(self, action: CompileStyles, _: RunContext) -> None:
        compile_styles(action)

    def _remove(self, action: RemovePaths, _: RunContext) -> None:
        remove_paths(action, working_dir=self.working_dir)

    def _command(self, action: ExternalCommand, _: RunContext) -> None:
        argv = split_command(action.command)
        result = self.process.run(ProcessRequest(argv=argv, cwd=action.cwd or self.working_dir))
        for line in result.output.splitlines():
            logger.debug("[%s] %s", argv[0], line)
        if result.exit_code != 0:
            raise ActionError(
                f"Command {action.command!r} exited with code {result.exit_code}"
                + (f":\n{result.output_tail()}" if result.output.strip() else "."),
                transient=False,
            )

    def _serve(self, action: ServeDirectory, context: RunContext) -> None:
        if context.server is not None:
            raise ActionError("A preview server is already set up for this run.")
        context.server = self.server_factory(action)
        logger.info(
            "Preview server prepared for %s; it listens on port %d once watching starts",
            action.root,
            action.port,
        )

    def _open(self, action: OpenBrowser, context: RunContext) -> None:
        if context.server is None:
            raise ActionError("Cannot open a browser before the preview server is set up.")
        context.server.open_on_start(action.url)

    def _watch(self, action: WatchFiles, context: RunContext) -> None:
        if context.server is None:
            raise ActionError("Watching needs the preview server set up earlier in the run.")
        session = WatchSession(
            server=context.server,
            rules=action.rules,
            run_tasks=context.run_tasks,
            reload_delay=action.reload_delay,
        )
        with cancel_on_signals(context.token):
            session.run(context.token)
