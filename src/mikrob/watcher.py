"""Watch mode — rebuild the application when the source tree changes.

``LiveApp`` is the ASGI callable handed to the server.  It forwards every
request to the current build and replaces that build with a single
reference assignment when files change, so in-flight requests finish on the
build they started on and never see a half-registered route table.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from watchfiles import Change, DefaultFilter, awatch

if TYPE_CHECKING:
    from collections.abc import Iterable

    from chirp import App

    from mikrob.config import MikrobConfig

logger = logging.getLogger("mikrob")


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A file change detected by the watcher.

    Attributes:
        path: Absolute path to the changed file.
        kind: Type of filesystem change.

    """

    path: Path
    kind: Literal["created", "modified", "deleted"]


# Mapping from watchfiles Change enum to our kind literals.
_CHANGE_KIND_MAP: dict[Change, Literal["created", "modified", "deleted"]] = {
    Change.added: "created",
    Change.modified: "modified",
    Change.deleted: "deleted",
}


def to_change_events(raw_changes: Iterable[tuple[Change, str]], root: Path) -> list[ChangeEvent]:
    """Convert watchfiles changes under *root* into sorted ChangeEvents."""
    events: list[ChangeEvent] = []
    for change_type, path_str in raw_changes:
        path = Path(path_str)
        if not path.is_relative_to(root):
            continue
        events.append(ChangeEvent(path=path, kind=_CHANGE_KIND_MAP.get(change_type, "modified")))
    return sorted(events, key=lambda e: str(e.path))


class LiveApp:
    """Swappable handle to the current compiled application.

    Args:
        app: The initial build.
        build: Zero-argument coroutine function producing a fresh build.
        config: Configuration; ``config.root`` is the watched tree.

    """

    __slots__ = ("_app", "_build", "_config", "_task", "build_count")

    def __init__(
        self,
        app: App,
        build: Callable[[], Awaitable[App]],
        config: MikrobConfig,
    ) -> None:
        self._app = app
        self._build = build
        self._config = config
        self._task: asyncio.Task[None] | None = None
        self.build_count = 1

    @property
    def app(self) -> App:
        """The build serving new requests."""
        return self._app

    async def rebuild(self) -> App:
        """Build a new application and make it the current one.

        On failure the previous build keeps serving and the error is logged.

        """
        try:
            app = await self._build()
        except Exception:
            logger.exception("Rebuild failed; still serving the previous build")
            return self._app
        self._app = app
        self.build_count += 1
        return app

    async def watch(self, *, stop_event: asyncio.Event | None = None) -> None:
        """Rebuild on every batch of changes under ``config.root``."""
        root = self._config.root
        async for raw_changes in awatch(root, watch_filter=DefaultFilter(), stop_event=stop_event):
            events = to_change_events(raw_changes, root)
            if not events:
                continue
            for event in events:
                logger.info("%s %s", event.kind, event.path.relative_to(root))
            await self.rebuild()

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        # Read the reference once; a concurrent swap only affects later requests.
        app = self._app
        await app(scope, receive, send)

    async def _handle_lifespan(self, receive: Any, send: Any) -> None:
        """Start the watcher on startup and cancel it on shutdown."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                self._task = asyncio.create_task(self.watch())
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await self.stop()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def stop(self) -> None:
        """Cancel the watcher task, if running."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
