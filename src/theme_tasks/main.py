"""CLI entrypoint for theme-tasks."""

import logging
from pathlib import Path

import rich_click as click

from theme_tasks import __version__
from theme_tasks.controllers import ListTasksCommand, RunTargetsCommand, ThemeTasksCliController
from theme_tasks.errors import TaskConfigurationError, TaskFailedError

click.rich_click.USE_MARKDOWN = True
CONTROLLER = ThemeTasksCliController()

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="theme-tasks")
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Logging verbosity.",
)
@click.pass_context
def theme_tasks(ctx: click.Context, log_level: str) -> None:
    """Build, serve and watch the documentation theme.

    Without a subcommand the `default` target runs.
    """

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )
    logging.getLogger("tornado.access").setLevel(logging.WARNING)
    if ctx.invoked_subcommand is None:
        ctx.invoke(run, theme_dir=None, targets=())


@theme_tasks.command("run")
@click.option(
    "--theme-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Theme directory; defaults to THEME_TASKS_THEME_DIR or the current directory.",
)
@click.argument("targets", nargs=-1)
def run(theme_dir: Path | None, targets: tuple[str, ...]) -> None:
    """Run targets in order, for example `fonts`, `default` or `watch`."""

    try:
        lines = CONTROLLER.run_targets(RunTargetsCommand(theme_dir=theme_dir, targets=targets))
    except TaskConfigurationError as error:
        raise click.ClickException(f"Configuration error: {error}") from error
    except TaskFailedError as error:
        raise click.ClickException(f"Aborted at {error.task_name}: {error.cause}") from error
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


@theme_tasks.command("list")
@click.option(
    "--theme-dir",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Theme directory; defaults to THEME_TASKS_THEME_DIR or the current directory.",
)
def list_tasks(theme_dir: Path | None) -> None:
    """List registered tasks and what they run."""

    try:
        lines = CONTROLLER.list_tasks(ListTasksCommand(theme_dir=theme_dir))
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    theme_tasks()
