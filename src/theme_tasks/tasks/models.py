"""Task definitions and primitive action descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar


@dataclass(frozen=True, slots=True)
class CopyAssets:
    """Copy files matching a glob into one flat destination directory."""

    kind: ClassVar[str] = "copy"

    source_glob: str
    destination: Path
    files_only: bool = True


@dataclass(frozen=True, slots=True)
class CompileStyles:
    """Compile every non-partial Sass file of a directory into CSS."""

    kind: ClassVar[str] = "sass"

    source_dir: Path
    destination: Path
    output_style: str
    source_glob: str = "*.sass"
    output_extension: str = ".css"
    include_paths: tuple[Path, ...] = ()


@dataclass(frozen=True, slots=True)
class RemovePaths:
    """Delete files or directory trees; a missing target counts as removed."""

    kind: ClassVar[str] = "clean"

    targets: tuple[Path, ...]
    force: bool = False


@dataclass(frozen=True, slots=True)
class ExternalCommand:
    """Run a literal command line and fail on non-zero exit."""

    kind: ClassVar[str] = "exec"

    command: str
    cwd: Path | None = None


@dataclass(frozen=True, slots=True)
class ServeDirectory:
    """Start the live-reload preview server for a directory."""

    kind: ClassVar[str] = "connect"

    root: Path
    host: str = "localhost"
    port: int = 1919
    livereload_port: int = 1919


@dataclass(frozen=True, slots=True)
class OpenBrowser:
    """Open a browser tab once the preview server is listening."""

    kind: ClassVar[str] = "open"

    url: str


@dataclass(frozen=True, slots=True)
class WatchRule:
    """Patterns to observe and what to do when one of them changes."""

    name: str
    patterns: tuple[str, ...]
    tasks: tuple[str, ...] = ()
    live_reload: bool = False


@dataclass(frozen=True, slots=True)
class WatchFiles:
    """Observe files until cancelled, re-running tasks per rule."""

    kind: ClassVar[str] = "watch"

    rules: tuple[WatchRule, ...]
    reload_delay: float | None = None


Action = (
    CopyAssets
    | CompileStyles
    | RemovePaths
    | ExternalCommand
    | ServeDirectory
    | OpenBrowser
    | WatchFiles
)


@dataclass(frozen=True, slots=True)
class TaskDefinition:
    """Either an ordered list of other task names or one primitive action."""

    steps: tuple[str, ...] = ()
    action: Action | None = None
    description: str = ""

    def __post_init__(self) -> None:
        if self.steps and self.action is not None:
            raise ValueError("Task definition cannot have both steps and an action.")
        if not self.steps and self.action is None:
            raise ValueError("Task definition needs steps or an action.")

    @classmethod
    def composite(cls, *steps: str, description: str = "") -> TaskDefinition:
        return cls(steps=tuple(steps), description=description)

    @classmethod
    def primitive(cls, action: Action, description: str = "") -> TaskDefinition:
        return cls(action=action, description=description)

    @property
    def is_composite(self) -> bool:
        return self.action is None

    @property
    def kind(self) -> str:
        if self.action is None:
            return "composite"
        return self.action.kind


@dataclass(frozen=True, slots=True)
class PlannedStep:
    """One primitive action scheduled under its registered task name."""

    task_name: str
    action: Action
