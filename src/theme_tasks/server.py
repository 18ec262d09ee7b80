"""Live-reload preview server."""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from livereload import Server
from livereload.watcher import Watcher
from tornado.ioloop import IOLoop

from theme_tasks.cancellation import CancellationToken
from theme_tasks.errors import ActionError
from theme_tasks.tasks.models import ServeDirectory

logger = logging.getLogger(__name__)

# Watch delay that runs the callback without notifying browsers.
NO_RELOAD = "forever"


class DevServer(Protocol):
    """Preview server that serves a directory and observes files."""

    def watch(
        self,
        pattern: str,
        callback: Callable[[], None] | None,
        *,
        live_reload: bool,
        delay: float | None = None,
    ) -> None:
        """Call callback when files matching pattern change."""

    def open_on_start(self, url: str) -> None:
        """Open url in a browser once the server is listening."""

    def serve(self, token: CancellationToken) -> None:
        """Serve and watch until the token is cancelled."""


class RuleWatcher(Watcher):
    """Polling watcher that honours ``delay="forever"``.

    Changes seen only by ``forever`` watches run their callbacks without
    notifying browsers; a change under any other watch reloads them.
    """

    def __init__(self) -> None:
        super().__init__()
        self._reload_requested = False

    def is_changed(self, path, ignore=None):
        changed = super().is_changed(path, ignore)
        if changed and self._tasks[path]["delay"] != NO_RELOAD:
            self._reload_requested = True
        return changed

    def examine(self):
        if self._changes:
            return super().examine()
        self._reload_requested = False
        filepath, delay = super().examine()
        if filepath and not self._reload_requested:
            return filepath, NO_RELOAD
        return filepath, delay


class LiveReloadServer:
    """DevServer backed by livereload; one instance serves once."""

    def __init__(self, *, root: Path, host: str, port: int, livereload_port: int) -> None:
        self.root = root
        self.host = host
        self.port = port
        self.livereload_port = livereload_port
        self._server = Server(watcher=RuleWatcher())
        self._open_urls: list[str] = []

    @classmethod
    def for_action(cls, action: ServeDirectory) -> LiveReloadServer:
        return cls(
            root=action.root,
            host=action.host,
            port=action.port,
            livereload_port=action.livereload_port,
        )

    def watch(
        self,
        pattern: str,
        callback: Callable[[], None] | None,
        *,
        live_reload: bool,
        delay: float | None = None,
    ) -> None:
        reload_delay = delay if live_reload else NO_RELOAD
        self._server.watch(pattern, callback, delay=reload_delay)

    def open_on_start(self, url: str) -> None:
        self._open_urls.append(url)

    def serve(self, token: CancellationToken) -> None:
        if token.cancelled:
            return
        asyncio.set_event_loop(asyncio.new_event_loop())
        loop = IOLoop.current()
        for url in self._open_urls:
            loop.add_callback(webbrowser.open, url)
        token.add_callback(lambda: loop.add_callback(loop.stop))

        # Notifications share the HTTP port unless a separate one is configured.
        liveport = None if self.livereload_port == self.port else self.livereload_port
        logger.info(
            "Serving %s at http://%s:%d (live reload on %d)",
            self.root,
            self.host,
            self.port,
            self.livereload_port,
        )
        try:
            self._server.serve(
                port=self.port,
                liveport=liveport,
                host=self.host,
                root=str(self.root),
            )
        except OSError as error:
            raise ActionError(
                f"Preview server cannot listen on {self.host}:{self.port}: {error}",
                transient=True,
            ) from error
        finally:
            # livereload closes the loop itself after a normal stop.
            if not loop.asyncio_loop.is_closed():
                loop.close(all_fds=True)
            logger.info("Preview server stopped")

