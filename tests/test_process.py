from __future__ import annotations

import sys
from pathlib import Path

import allure
import pytest

from theme_tasks.errors import ActionError
from theme_tasks.process import ProcessRequest, ProcessResult, SubprocessRunner, split_command

pytestmark = [
    allure.epic("Theme Build"),
    allure.feature("External Commands"),
]


def test_subprocess_runner_captures_combined_output(tmp_path: Path) -> None:
    script = "import os, sys; print(os.getcwd()); print('warn', file=sys.stderr); sys.exit(3)"

    result = SubprocessRunner().run(
        ProcessRequest(argv=(sys.executable, "-c", script), cwd=tmp_path),
    )

    assert result.exit_code == 3
    assert str(tmp_path.resolve()) in result.output
    assert "warn" in result.output


def test_subprocess_runner_reports_missing_command() -> None:
    with pytest.raises(ActionError, match="Command not found: definitely-not-a-real-tool") as excinfo:
        SubprocessRunner().run(ProcessRequest(argv=("definitely-not-a-real-tool", "--help")))

    assert excinfo.value.transient is False


def test_split_command_keeps_quoted_arguments() -> None:
    assert split_command('sphinx-build "../../../my source" ../../../build') == (
        "sphinx-build",
        "../../../my source",
        "../../../build",
    )


@pytest.mark.parametrize("command", ["", "   ", 'unterminated "quote'])
def test_split_command_rejects_unusable_lines(command: str) -> None:
    with pytest.raises(ActionError):
        split_command(command)


def test_output_tail_keeps_last_lines() -> None:
    result = ProcessResult(exit_code=1, output="\n".join(f"line {i}" for i in range(50)))

    assert result.output_tail(2) == "line 48\nline 49"
