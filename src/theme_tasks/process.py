"""External process capability used by command tasks."""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from theme_tasks.errors import ActionError

logger = logging.getLogger(__name__)

_OUTPUT_TAIL_LINES = 20


@dataclass(slots=True)
class ProcessRequest:
    """Inputs required to run one external command."""

    argv: tuple[str, ...]
    cwd: Path | None = None


@dataclass(slots=True)
class ProcessResult:
    """Exit status and combined stdout/stderr of a finished command."""

    exit_code: int
    output: str

    def output_tail(self, lines: int = _OUTPUT_TAIL_LINES) -> str:
        return "\n".join(self.output.splitlines()[-lines:])


class ExternalProcess(Protocol):
    """Protocol implemented by process runners."""

    def run(self, request: ProcessRequest) -> ProcessResult:
        """Run a command to completion and return its outcome."""


class SubprocessRunner:
    """Run commands as child processes, waiting without a timeout."""

    def run(self, request: ProcessRequest) -> ProcessResult:
        if not request.argv:
            raise ActionError("Cannot run an empty command.", transient=False)
        logger.debug("Spawning %s (cwd=%s)", shlex.join(request.argv), request.cwd)
        try:
            completed = subprocess.run(  # noqa: S603
                list(request.argv),
                cwd=request.cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
            )
        except FileNotFoundError as error:
            raise ActionError(
                f"Command not found: {request.argv[0]}",
                transient=False,
            ) from error
        except OSError as error:
            raise ActionError(
                f"Command failed to start: {error}",
                transient=True,
            ) from error
        return ProcessResult(exit_code=completed.returncode, output=completed.stdout or "")


def split_command(command: str) -> tuple[str, ...]:
    """Split a literal command line into argv without involving a shell."""

    try:
        argv = shlex.split(command)
    except ValueError as error:
        raise ActionError(f"Malformed command line {command!r}: {error}") from error
    if not argv:
        raise ActionError("Command line is empty.", transient=False)
    return tuple(argv)
