from __future__ import annotations

import threading

import allure
from conftest import FakeDevServer

from theme_tasks.cancellation import CancellationToken
from theme_tasks.errors import ActionError, TaskFailedError
from theme_tasks.tasks import WatchRule
from theme_tasks.watch import RebuildTrigger, WatchSession

pytestmark = [
    allure.epic("Development Loop"),
    allure.feature("Watch & Rebuild"),
]

RULES = (
    WatchRule(name="sass", patterns=("sass/*.sass", "vendor/**/*.sass"), tasks=("sass:dev",)),
    WatchRule(
        name="sphinx",
        patterns=("theme/**/*", "docs/**/*.rst"),
        tasks=("clean:build", "exec:build_sphinx"),
    ),
    WatchRule(name="livereload", patterns=("build/**/*",), live_reload=True),
)


def test_trigger_during_rebuild_is_coalesced_into_one_follow_up() -> None:
    calls: list[int] = []
    trigger: RebuildTrigger

    def rebuild() -> None:
        calls.append(len(calls))
        if len(calls) == 1:
            trigger()
            trigger()
            trigger()

    trigger = RebuildTrigger("sass", rebuild)
    trigger()

    assert calls == [0, 1]
    assert trigger.runs == 2
    assert not trigger.busy


def test_concurrent_triggers_never_overlap() -> None:
    started = threading.Event()
    release = threading.Event()
    active = 0
    max_active = 0
    lock = threading.Lock()

    def rebuild() -> None:
        nonlocal active, max_active
        with lock:
            active += 1
            max_active = max(max_active, active)
        started.set()
        release.wait(timeout=5)
        with lock:
            active -= 1

    trigger = RebuildTrigger("sphinx", rebuild)
    first = threading.Thread(target=trigger)
    first.start()
    assert started.wait(timeout=5)
    for _ in range(5):
        trigger()
    release.set()
    first.join(timeout=5)

    assert max_active == 1
    assert trigger.runs == 2


def test_failed_rebuild_is_logged_and_trigger_stays_usable(caplog) -> None:
    outcomes = [TaskFailedError("exec:build_sphinx", ActionError("exit 1")), None]

    def rebuild() -> None:
        outcome = outcomes.pop(0)
        if outcome is not None:
            raise outcome

    trigger = RebuildTrigger("sphinx", rebuild)
    trigger()
    trigger()

    assert trigger.runs == 2
    assert trigger.failures == 1
    assert "still watching" in caplog.text


def test_session_subscribes_each_rule_independently() -> None:
    server = FakeDevServer()
    session = WatchSession(server=server, rules=RULES, run_tasks=lambda tasks: None)

    session.subscribe()

    assert [(pattern, live) for pattern, _, live in server.watches] == [
        ("sass/*.sass", False),
        ("vendor/**/*.sass", False),
        ("theme/**/*", False),
        ("docs/**/*.rst", False),
        ("build/**/*", True),
    ]
    assert [callback for pattern, callback, _ in server.watches if pattern.startswith("build")] == [
        None,
    ]
    assert set(session.triggers) == {"sass", "sphinx"}


def test_session_reruns_tasks_per_rule_and_stops_on_cancel() -> None:
    runs: list[tuple[str, ...]] = []

    def on_serve(server: FakeDevServer, token: CancellationToken) -> None:
        server.fire("sass/*.sass")
        server.fire("docs/**/*.rst")
        server.fire("build/**/*")
        token.cancel(reason="test")

    server = FakeDevServer(on_serve=on_serve)
    session = WatchSession(server=server, rules=RULES, run_tasks=runs.append)
    token = CancellationToken()

    session.run(token)

    assert server.served
    assert runs == [("sass:dev",), ("clean:build", "exec:build_sphinx")]
    assert token.reason == "test"


def test_session_keeps_watching_after_failed_rebuild() -> None:
    attempts: list[tuple[str, ...]] = []

    def run_tasks(tasks) -> None:
        attempts.append(tuple(tasks))
        if len(attempts) == 1:
            raise TaskFailedError("exec:build_sphinx", ActionError("exit 2"))

    def on_serve(server: FakeDevServer, token: CancellationToken) -> None:
        server.fire("docs/**/*.rst")
        server.fire("docs/**/*.rst")
        token.cancel()

    server = FakeDevServer(on_serve=on_serve)
    session = WatchSession(server=server, rules=RULES, run_tasks=run_tasks)
    session.run(CancellationToken())

    assert len(attempts) == 2
    assert session.triggers["sphinx"].failures == 1


def test_cancellation_callbacks_run_once_and_late_callbacks_run_immediately() -> None:
    token = CancellationToken()
    seen: list[str] = []
    token.add_callback(lambda: seen.append("early"))

    token.cancel(reason="SIGINT")
    token.cancel(reason="again")
    token.add_callback(lambda: seen.append("late"))

    assert seen == ["early", "late"]
    assert token.cancelled
    assert token.reason == "SIGINT"
    assert token.wait(timeout=0)
