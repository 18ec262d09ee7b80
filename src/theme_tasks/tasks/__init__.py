"""Task definitions, registry and resolution."""

from theme_tasks.tasks.models import (
    Action,
    CompileStyles,
    CopyAssets,
    ExternalCommand,
    OpenBrowser,
    PlannedStep,
    RemovePaths,
    ServeDirectory,
    TaskDefinition,
    WatchFiles,
    WatchRule,
)
from theme_tasks.tasks.registry import TaskRegistry, TaskTable

__all__ = [
    "Action",
    "CompileStyles",
    "CopyAssets",
    "ExternalCommand",
    "OpenBrowser",
    "PlannedStep",
    "RemovePaths",
    "ServeDirectory",
    "TaskDefinition",
    "TaskRegistry",
    "TaskTable",
    "WatchFiles",
    "WatchRule",
]
