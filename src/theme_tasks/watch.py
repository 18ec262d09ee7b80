"""File watch session: per-rule rebuild triggers on top of the preview server."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence

from theme_tasks.cancellation import CancellationToken
from theme_tasks.errors import TaskFailedError
from theme_tasks.server import DevServer
from theme_tasks.tasks.models import WatchRule

logger = logging.getLogger(__name__)


class RebuildTrigger:
    """Run a rebuild with at most one in flight.

    A trigger that arrives while a rebuild is running is folded into a single
    follow-up run. A failed rebuild is logged and does not stop the watcher.
    """

    def __init__(self, name: str, rebuild: Callable[[], None]) -> None:
        # livereload logs watch callbacks by their ``name`` attribute.
        self.name = name
        self._rebuild = rebuild
        self._lock = threading.Lock()
        self._busy = False
        self._rerun_requested = False
        self.runs = 0
        self.failures = 0

    def __call__(self) -> None:
        with self._lock:
            if self._busy:
                self._rerun_requested = True
                logger.debug("Rebuild %s already running; queued one more run", self.name)
                return
            self._busy = True

        try:
            while True:
                self._run_once()
                with self._lock:
                    if not self._rerun_requested:
                        self._busy = False
                        return
                    self._rerun_requested = False
        except BaseException:
            with self._lock:
                self._busy = False
                self._rerun_requested = False
            raise

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._busy

    def _run_once(self) -> None:
        self.runs += 1
        try:
            self._rebuild()
        except TaskFailedError as error:
            self.failures += 1
            logger.error("Rebuild %s failed: %s; still watching", self.name, error)


class WatchSession:
    """Subscribe watch rules to a preview server and run until cancelled."""

    def __init__(
        self,
        *,
        server: DevServer,
        rules: Sequence[WatchRule],
        run_tasks: Callable[[Sequence[str]], object],
        reload_delay: float | None = None,
    ) -> None:
        self.server = server
        self.rules = tuple(rules)
        self.reload_delay = reload_delay
        self._run_tasks = run_tasks
        self.triggers: dict[str, RebuildTrigger] = {}

    def subscribe(self) -> None:
        for rule in self.rules:
            trigger = self._trigger_for(rule)
            for pattern in rule.patterns:
                self.server.watch(
                    pattern,
                    trigger,
                    live_reload=rule.live_reload,
                    delay=self.reload_delay,
                )
            logger.info(
                "Watching %s: %d pattern(s) -> %s",
                rule.name,
                len(rule.patterns),
                ", ".join(rule.tasks) if rule.tasks else "live reload",
            )

    def run(self, token: CancellationToken) -> None:
        """Block until cancelled; stopping is an expected way out, not an error."""

        self.subscribe()
        self.server.serve(token)
        logger.info("Watch stopped (%s)", token.reason or "server exited")

    def _trigger_for(self, rule: WatchRule) -> RebuildTrigger | None:
        if not rule.tasks:
            return None
        tasks = tuple(rule.tasks)
        trigger = RebuildTrigger(rule.name, lambda: self._rerun(rule.name, tasks))
        self.triggers[rule.name] = trigger
        return trigger

    def _rerun(self, rule_name: str, tasks: tuple[str, ...]) -> None:
        logger.info("Change matched %s; running %s", rule_name, ", ".join(tasks))
        self._run_tasks(tasks)
