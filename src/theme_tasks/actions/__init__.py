"""Primitive action implementations."""

from theme_tasks.actions.executor import ActionExecutor, RunContext

__all__ = ["ActionExecutor", "RunContext"]
