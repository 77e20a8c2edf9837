"""Route snapshot cache with debounced, serialized rescans.

The cache owns the only mutable reference in the pages pipeline: the
current ``RouteSnapshot``.  Readers grab the reference once per request
and keep using that snapshot even if a rescan publishes a newer one in
the meantime.  A rescan always builds a brand-new snapshot and swaps the
reference in a single assignment.

Thread safety:
    Rescans run under ``_rescan_lock`` so two scans never interleave.
    File-system notifications arrive on the watcher thread and go
    through ``RescanScheduler``, which coalesces bursts into one rescan
    on a timer thread.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

from armorpage.config import CacheMode
from armorpage.pages.discovery import LAYOUT_FILE, PAGE_FILE, scan_routes
from armorpage.pages.types import RouteSnapshot

logger = logging.getLogger("armorpage.pages")


def is_route_file(path: str | Path) -> bool:
    """Whether a changed path can alter the route or layout maps."""
    name = str(path)
    return name.endswith(PAGE_FILE) or name.endswith(LAYOUT_FILE)


class RescanScheduler:
    """Trailing-edge debounce around a single action.

    Every ``trigger()`` cancels the pending timer and starts a new one, so
    a burst of triggers closer together than *delay* runs the action once,
    *delay* seconds after the last trigger.  Runs of the action never
    overlap.

    Usage::

        scheduler = RescanScheduler(0.05, cache.rescan)
        scheduler.trigger()
        scheduler.trigger()   # resets the timer; one rescan total
    """

    __slots__ = ("_action", "_delay", "_lock", "_run_lock", "_timer")

    def __init__(self, delay: float, action: Callable[[], object]) -> None:
        self._delay = delay
        self._action = action
        self._lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._timer: threading.Timer | None = None

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """Whether a run is scheduled but has not started yet."""
        with self._lock:
            return self._timer is not None

    def trigger(self) -> None:
        """(Re)start the debounce window."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self._delay, self._fire)
            timer.name = "armorpage-rescan"
            timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        """Drop the pending run, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _fire(self) -> None:
        with self._lock:
            if self._timer is not threading.current_thread():
                # Superseded by a later trigger() that raced this timer.
                return
            self._timer = None
        with self._run_lock:
            try:
                self._action()
            except Exception:
                logger.exception("Failed to rescan routes")


class RouteCache:
    """Owner of the published ``RouteSnapshot``.

    Independent instances never share state, so several apps or tests can
    each hold their own cache.

    Args:
        routes_dir: Routes directory; resolved to an absolute path once.
        mode: ``"request"``, ``"cache"`` or ``"hybrid"`` (see ``PagesConfig``).
        debounce: Seconds to wait after the last qualifying change.
        rescan_interval: Maximum snapshot age in hybrid mode.
        clock: Monotonic clock, replaceable in tests.
    """

    __slots__ = (
        "_clock",
        "_mode",
        "_rescan_interval",
        "_rescan_lock",
        "_root",
        "_scheduler",
        "_snapshot",
    )

    def __init__(
        self,
        routes_dir: str | Path,
        *,
        mode: CacheMode = "cache",
        debounce: float = 0.05,
        rescan_interval: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._root = Path(routes_dir).resolve()
        self._mode: CacheMode = mode
        self._rescan_interval = rescan_interval
        self._clock = clock
        self._rescan_lock = threading.Lock()
        self._snapshot: RouteSnapshot | None = None
        self._scheduler = RescanScheduler(debounce, self.rescan)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def mode(self) -> CacheMode:
        return self._mode

    @property
    def snapshot(self) -> RouteSnapshot | None:
        """The currently published snapshot, without triggering a scan."""
        return self._snapshot

    @property
    def scheduler(self) -> RescanScheduler:
        return self._scheduler

    def load(self) -> RouteSnapshot | None:
        """Return the snapshot a request should use, scanning if needed.

        Returns ``None`` when the routes directory does not exist.
        """
        if self._mode == "request":
            return self.rescan()

        snapshot = self._snapshot
        if snapshot is None:
            return self.rescan()
        if self._mode == "hybrid" and self._clock() - snapshot.scanned_at >= self._rescan_interval:
            return self.rescan()
        return snapshot

    def rescan(self) -> RouteSnapshot | None:
        """Scan the routes directory and publish a fresh snapshot.

        A missing directory publishes ``None``.
        """
        with self._rescan_lock:
            if not self._root.is_dir():
                self._snapshot = None
                return None

            try:
                scanned = scan_routes(self._root)
            except FileNotFoundError:
                logger.warning("Routes directory vanished during scan: %s", self._root)
                self._snapshot = None
                return None
            snapshot = RouteSnapshot.build(self._root, scanned, scanned_at=self._clock())
            self._snapshot = snapshot
            logger.debug(
                "Scanned %s: %d pages, %d layouts",
                self._root,
                len(snapshot.routes),
                len(snapshot.layouts),
            )
            return snapshot

    def notify(self, path: str | Path) -> bool:
        """Feed one file-system change into the cache.

        Only page and layout files schedule a rescan; everything else is
        ignored.  Returns whether a rescan was scheduled.
        """
        if not is_route_file(path):
            return False
        self._scheduler.trigger()
        return True

    def close(self) -> None:
        """Cancel any pending debounced rescan."""
        self._scheduler.cancel()
