"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from theme_tasks.actions import RunContext
from theme_tasks.cancellation import CancellationToken
from theme_tasks.config import Settings
from theme_tasks.errors import ActionError
from theme_tasks.process import ProcessRequest, ProcessResult
from theme_tasks.tasks.models import Action

A_SASS = """\
@import "partial"

.a
  color: red
  margin: 0 auto
"""

B_SASS = """\
.b
  .inner
    text-align: center
"""

PARTIAL_SASS = """\
$pad: 4px

.partial
  padding: $pad
"""


class FakeProcess:
    """In-process stand-in for external commands, keyed by executable name."""

    def __init__(self, exit_codes: dict[str, int] | None = None) -> None:
        self.exit_codes = exit_codes or {}
        self.requests: list[ProcessRequest] = []

    def run(self, request: ProcessRequest) -> ProcessResult:
        self.requests.append(request)
        exit_code = self.exit_codes.get(request.argv[0], 0)
        output = "ok" if exit_code == 0 else f"{request.argv[0]}: boom"
        return ProcessResult(exit_code=exit_code, output=output)

    def argvs(self) -> list[tuple[str, ...]]:
        return [request.argv for request in self.requests]


class SpyExecutor:
    """Records executed actions; raises ActionError for configured ones."""

    def __init__(self, fail_on: tuple[Action, ...] = ()) -> None:
        self.fail_on = fail_on
        self.executed: list[Action] = []

    def execute(self, action: Action, context: RunContext) -> None:
        if action in self.fail_on:
            raise ActionError(f"stand-in failure for {action.kind}")
        self.executed.append(action)


class FakeDevServer:
    """DevServer stand-in; ``on_serve`` plays the part of file events."""

    def __init__(self, on_serve: Callable[[FakeDevServer, CancellationToken], None] | None = None):
        self.on_serve = on_serve
        self.watches: list[tuple[str, Callable[[], None] | None, bool]] = []
        self.opened: list[str] = []
        self.served = False

    def watch(self, pattern, callback, *, live_reload, delay=None) -> None:
        self.watches.append((pattern, callback, live_reload))

    def open_on_start(self, url: str) -> None:
        self.opened.append(url)

    def serve(self, token: CancellationToken) -> None:
        self.served = True
        if self.on_serve is not None:
            self.on_serve(self, token)
        token.wait(timeout=2)

    def fire(self, pattern: str) -> None:
        for watched, callback, _ in self.watches:
            if watched == pattern and callback is not None:
                callback()


@pytest.fixture()
def fake_process() -> FakeProcess:
    return FakeProcess()


@pytest.fixture()
def theme_dir(tmp_path: Path) -> Path:
    """Theme checkout laid out like docs/source/_themes/sphinx_rtd_theme."""

    theme = tmp_path / "docs" / "source" / "_themes" / "sphinx_rtd_theme"
    sass_dir = theme / "sass"
    sass_dir.mkdir(parents=True)
    (sass_dir / "a.sass").write_text(A_SASS, "utf-8")
    (sass_dir / "b.sass").write_text(B_SASS, "utf-8")
    (sass_dir / "_partial.sass").write_text(PARTIAL_SASS, "utf-8")

    fonts = theme / "bower_components" / "font-awesome" / "fonts"
    (fonts / "nested").mkdir(parents=True)
    (fonts / "fontawesome-webfont.woff").write_bytes(b"woff")
    (fonts / "fontawesome-webfont.ttf").write_bytes(b"ttf")
    (fonts / "nested" / "ignored.svg").write_text("<svg/>", "utf-8")

    (theme / "sphinx_rtd_theme" / "static").mkdir(parents=True)
    return theme


@pytest.fixture()
def settings(theme_dir: Path, monkeypatch) -> Settings:
    for name in (
        "THEME_TASKS_THEME_DIR",
        "THEME_TASKS_BUILD_DIR",
        "THEME_TASKS_DOCS_SOURCE_DIR",
        "THEME_TASKS_DOCS_BUILDER_COMMAND",
        "THEME_TASKS_SASS_INCLUDE_PATHS",
    ):
        monkeypatch.delenv(name, raising=False)
    return Settings.from_env(theme_dir=theme_dir)
