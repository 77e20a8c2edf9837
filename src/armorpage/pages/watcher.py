"""Routes watcher: feeds file-system changes into the route cache.

Runs ``watchfiles`` in a background thread and forwards every change
under the routes directory to a callback (normally ``RouteCache.notify``).
The watcher does not decide what qualifies for a rescan; the cache does.

Failures are logged and never reach request handling: a broken watcher
only means the cache may go stale until the next successful rescan.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from watchfiles import Change, DefaultFilter

logger = logging.getLogger("armorpage.watcher")


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


def to_change_event(change: Change, path: str) -> ChangeEvent:
    """Translate one raw ``watchfiles`` change."""
    return ChangeEvent(path=Path(path), kind=_CHANGE_KIND_MAP.get(change, "modified"))


class RoutesWatcher:
    """Watches the routes directory in a background thread.

    Args:
        root: Directory to watch recursively.
        on_change: Called on the watcher thread for every change.
        debounce: ``watchfiles`` batching window in milliseconds.
        step: ``watchfiles`` polling step in milliseconds.
    """

    def __init__(
        self,
        root: Path,
        on_change: Callable[[str], object],
        *,
        debounce: int = 50,
        step: int = 50,
    ) -> None:
        self._root = root
        self._on_change = on_change
        self._debounce = debounce
        self._step = step
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        """Whether the watcher background thread is active."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start watching in a background thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="armorpage-watcher",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the watcher to stop and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    def dispatch(self, event: ChangeEvent) -> None:
        """Forward one change to the callback, logging any failure."""
        try:
            self._on_change(str(event.path))
        except Exception:
            logger.exception("routes watcher error while handling %s", event.path)

    def _watch_loop(self) -> None:
        """Background thread: run watchfiles and forward its changes."""
        from watchfiles import watch

        try:
            for raw_changes in watch(
                self._root,
                watch_filter=DefaultFilter(),
                stop_event=self._stop_event,
                debounce=self._debounce,
                step=self._step,
                raise_interrupt=False,
            ):
                for change, path_str in raw_changes:
                    self.dispatch(to_change_event(change, path_str))
        except Exception:
            logger.exception("routes watcher error")
